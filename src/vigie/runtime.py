"""
Composition root for one monitoring run.

:class:`Runtime` owns the entity store, ledger, alert sink, and event bus
for the lifetime of a run and wires them from :class:`VigieSettings`.
Nothing here is global: two runtimes never share state.

Usage::

    runtime = Runtime()
    runtime.ingest(entities, ownerships)
    runtime.watch_persons(["Vincent Bolloré"])
    runtime.watch_media(["Le Monde"])

    runtime.publish(Transfer.between(
        runtime.store, buyer="C", seller="A", target="Le Monde", percentage=20,
    ))
    for alert in runtime.sink:
        print(alert)
"""

from __future__ import annotations

from collections.abc import Iterable

from vigie.core.logging import configure_logging, get_logger
from vigie.core.result import Result
from vigie.core.settings import VigieSettings, get_settings
from vigie.domain.entities import Entity, EntityStore
from vigie.domain.events import Event, EventType
from vigie.domain.ownership import OwnershipLedger
from vigie.framework.alerts import AlertSink
from vigie.framework.bus import Dispatch, EventBus
from vigie.framework.watchers import MediaWatcher, PersonWatcher
from vigie.ops.ingest import IngestReport, OwnershipRow, ingest

logger = get_logger(__name__)


class Runtime:
    """Store, ledger, sink, and bus for one run."""

    def __init__(self, settings: VigieSettings | None = None, *, configure_logs: bool = False) -> None:
        self.settings = settings or get_settings()
        if configure_logs:
            configure_logging(
                level=self.settings.log_level,
                json_format=self.settings.json_logs,
                service=self.settings.service_name,
            )
        self.store = EntityStore()
        self.ledger = OwnershipLedger.from_settings(self.settings, self.store)
        self.sink = AlertSink()
        self.bus = EventBus(self.ledger)

    def ingest(self, entities: Iterable[Entity], ownerships: Iterable[OwnershipRow]) -> IngestReport:
        return ingest(self.store, self.ledger, entities, ownerships)

    def watch_persons(self, names: Iterable[str], *, name: str | None = None) -> PersonWatcher:
        """Subscribe a :class:`PersonWatcher` for ``names`` to publications.

        Raises:
            UnknownEntity: a name is not registered
            InvalidOperation: a name resolves to a non-person entity
        """
        persons = [self.store.get(n) for n in names]
        watcher = PersonWatcher(persons, sink=self.sink, ledger=self.ledger, name=name)
        self.bus.subscribe(EventType.PUBLICATION, watcher)
        logger.info("watching_persons", watcher=watcher.name, persons=[p.key for p in persons])
        return watcher

    def watch_media(self, names: Iterable[str], *, name: str | None = None) -> MediaWatcher:
        """Subscribe a :class:`MediaWatcher` for ``names`` to transfers.

        Raises:
            UnknownEntity: a name is not registered
            InvalidOperation: a name resolves to a non-media entity
        """
        media = [self.store.get(n) for n in names]
        watcher = MediaWatcher(media, sink=self.sink, name=name)
        self.bus.subscribe(EventType.TRANSFER, watcher)
        logger.info("watching_media", watcher=watcher.name, media=[m.key for m in media])
        return watcher

    def publish(self, event: Event) -> Result[Dispatch]:
        return self.bus.publish(event)


__all__ = ["Runtime"]
