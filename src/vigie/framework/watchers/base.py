"""
Watcher protocol and shared base class.

A watcher is anything with a ``name`` and a ``handle(event)`` method that
returns the alerts the event triggers. :class:`BaseWatcher` adds the
bookkeeping every concrete watcher needs: a processing history of each
event examined, a local alert log, and forwarding to a shared
:class:`~vigie.framework.alerts.AlertSink`.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from vigie.core.errors import InvalidOperation
from vigie.domain.entities import Entity, EntityKind
from vigie.domain.events import Event
from vigie.framework.alerts import Alert, AlertSink

_counter = itertools.count(1)


@runtime_checkable
class Watcher(Protocol):
    """Single-method capability consumed by the event bus."""

    @property
    def name(self) -> str:
        """Unique watcher name, used as the alert source."""
        ...

    def handle(self, event: Event) -> list[Alert]:
        """Inspect ``event`` and return zero or more alerts."""
        ...


class BaseWatcher(ABC):
    """
    Base class for watcher implementations.

    Subclasses implement :meth:`evaluate`; :meth:`handle` records the
    event in :attr:`history` whether or not it is relevant, then stores
    and forwards whatever alerts ``evaluate`` returns.
    """

    kind_label = "watcher"

    def __init__(self, *, sink: AlertSink | None = None, name: str | None = None):
        self._sink = sink
        self._name = name or f"{self.kind_label}-{next(_counter)}"
        self._history: list[Event] = []
        self._alerts: list[Alert] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def history(self) -> list[Event]:
        """Every event examined, in order."""
        return list(self._history)

    @property
    def alerts(self) -> list[Alert]:
        """Every alert this watcher raised, in order."""
        return list(self._alerts)

    def handle(self, event: Event) -> list[Alert]:
        self._history.append(event)
        alerts = self.evaluate(event)
        for alert in alerts:
            self._alerts.append(alert)
            if self._sink is not None:
                self._sink.record(alert)
        return alerts

    @abstractmethod
    def evaluate(self, event: Event) -> list[Alert]:
        """Decide which alerts ``event`` warrants."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r})"


def watched_entities(entities: Iterable[Entity], kind: EntityKind) -> tuple[Entity, ...]:
    """Deduplicate a watch list, preserving order, and check entity kinds."""
    seen: dict[str, Entity] = {}
    for entity in entities:
        if not isinstance(entity, Entity) or entity.kind is not kind:
            raise InvalidOperation(
                f"Expected {kind.value} entities, got {entity!r}",
                field="watched",
                value=entity,
                constraint=kind.value,
            )
        seen.setdefault(entity.key, entity)
    return tuple(seen.values())


__all__ = ["Watcher", "BaseWatcher", "watched_entities"]
