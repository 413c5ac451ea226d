"""Watcher that follows persons through publications."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from vigie.core.identity import mentions_name
from vigie.domain.entities import Entity, EntityKind
from vigie.domain.events import Event, Publication
from vigie.domain.ownership import OwnershipLedger
from vigie.framework.alerts import Alert, AlertSeverity, AlertSink
from vigie.framework.watchers.base import BaseWatcher, watched_entities


class PersonWatcher(BaseWatcher):
    """
    Raise alerts when watched persons appear in publications.

    For every publication, each watched person is checked independently
    and may trigger up to three alerts:

    - the content contains the person's name (case and accent insensitive);
    - the person is in the publication's mention list;
    - the publication's source is a media outlet the person directly owns
      shares of (only when a ledger is given). Each such publication also
      counts toward :meth:`mention_shares`.

    Other event types are recorded in the history and otherwise ignored.
    """

    kind_label = "person-watcher"

    def __init__(
        self,
        persons: Iterable[Entity],
        *,
        sink: AlertSink | None = None,
        ledger: OwnershipLedger | None = None,
        name: str | None = None,
    ):
        super().__init__(sink=sink, name=name)
        self._persons = watched_entities(persons, EntityKind.PERSON)
        self._ledger = ledger
        self._mentions_by_media: Counter[str] = Counter()

    @property
    def persons(self) -> tuple[Entity, ...]:
        return self._persons

    def evaluate(self, event: Event) -> list[Alert]:
        if not isinstance(event, Publication):
            return []

        alerts: list[Alert] = []
        day = f"{event.timestamp:%Y-%m-%d}"
        source = event.source
        for person in self._persons:
            if mentions_name(event.content, person.name):
                alerts.append(
                    self._alert(
                        event,
                        person,
                        f"Publication about {person.name} on {day}: {event.content}",
                        reason="content",
                    )
                )
            if person in event.mentions:
                alerts.append(
                    self._alert(
                        event,
                        person,
                        f"Publication mentioning {person.name} on {day}: {event.content}",
                        reason="mention",
                    )
                )
            if source is not None and self._owns(person, source):
                self._mentions_by_media[source.name] += 1
                alerts.append(
                    self._alert(
                        event,
                        person,
                        f"Publication by {source.name}, a media owned by "
                        f"{person.name}: {event.content}",
                        reason="owned_source",
                        severity=AlertSeverity.WARNING,
                    )
                )
        return alerts

    def mention_shares(self) -> dict[str, float]:
        """Percentage of owned-source publications counted per media."""
        total = sum(self._mentions_by_media.values())
        if not total:
            return {}
        return {media: count * 100.0 / total for media, count in self._mentions_by_media.items()}

    def _owns(self, person: Entity, source: Entity) -> bool:
        if self._ledger is None or not source.is_media:
            return False
        return self._ledger.share(person, source) > self._ledger.tolerance

    def _alert(
        self,
        event: Publication,
        person: Entity,
        message: str,
        *,
        reason: str,
        severity: AlertSeverity = AlertSeverity.INFO,
    ) -> Alert:
        return Alert(
            message=message,
            event=event,
            source=self.name,
            subject=person.name,
            severity=severity,
            metadata={"reason": reason},
        )


__all__ = ["PersonWatcher"]
