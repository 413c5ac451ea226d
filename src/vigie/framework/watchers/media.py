"""Watcher that follows media outlets through ownership transfers."""

from __future__ import annotations

from collections.abc import Iterable

from vigie.domain.entities import Entity, EntityKind
from vigie.domain.events import Event, Transfer
from vigie.framework.alerts import Alert, AlertSeverity, AlertSink
from vigie.framework.watchers.base import BaseWatcher, watched_entities


class MediaWatcher(BaseWatcher):
    """Raise exactly one alert per transfer whose target is a watched media."""

    kind_label = "media-watcher"

    def __init__(
        self,
        media: Iterable[Entity],
        *,
        sink: AlertSink | None = None,
        name: str | None = None,
    ):
        super().__init__(sink=sink, name=name)
        self._media = watched_entities(media, EntityKind.MEDIA)

    @property
    def media(self) -> tuple[Entity, ...]:
        return self._media

    def evaluate(self, event: Event) -> list[Alert]:
        if not isinstance(event, Transfer) or event.target not in self._media:
            return []
        return [
            Alert(
                message=(
                    f"Transfer concerning {event.target.name} on "
                    f"{event.timestamp:%Y-%m-%d}: {event.describe()}"
                ),
                event=event,
                source=self.name,
                subject=event.target.name,
                severity=AlertSeverity.WARNING,
                metadata={
                    "buyer": event.buyer.name,
                    "seller": event.seller.name,
                    "percentage": event.percentage,
                },
            )
        ]


__all__ = ["MediaWatcher"]
