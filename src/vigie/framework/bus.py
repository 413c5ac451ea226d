"""
Synchronous event bus with a transactional ledger pre-step.

Manifesto:
    Watchers must only ever observe transfers that actually happened. The
    bus therefore applies a Transfer to the ownership ledger first and
    dispatches only when that succeeds. A refused transfer is returned as
    ``Err`` and no watcher hears about it.

    - **Validate, mutate, then dispatch:** Never interleave ledger writes
      with notifications
    - **Typed registry:** Subscriptions are keyed by ``EventType``
    - **Isolation:** One failing watcher does not starve the next
    - **Synchronous:** All watchers have run when ``publish`` returns

Architecture:
    ::

        publish(event)
          │
          ├── not a Publication/Transfer ──────────────► Err(MalformedEvent)
          │
          ├── with ledger.lock:
          │     ├── Transfer? ledger.transfer(...) ──fail─► Err(error)
          │     │                                         (no dispatch,
          │     │                                          no history)
          │     ├── history.append(event)
          │     └── for watcher in subscribers[event_type]:
          │           try: alerts += watcher.handle(event)
          │           except Exception: failures.append(...)
          │
          └── Ok(Dispatch(event, notified, alerts, failures))

Usage::

    bus = EventBus(ledger)
    bus.subscribe("transfer", MediaWatcher([le_monde], sink=sink))

    match bus.publish(Transfer(buyer=c, seller=a, target=le_monde, percentage=20)):
        case Ok(dispatch):
            print(len(dispatch.alerts))
        case Err(error):
            print(error)

Tags:
    vigie, events, dispatch, observer, transaction

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vigie.core.errors import DispatchError, MalformedEvent, VigieError
from vigie.core.logging import LogContext, get_logger
from vigie.core.result import Err, Ok, Result
from vigie.domain.events import EVENT_CLASSES, Event, EventType, Transfer
from vigie.domain.ownership import OwnershipLedger
from vigie.framework.alerts import Alert
from vigie.framework.watchers.base import Watcher

logger = get_logger(__name__)


@dataclass(frozen=True)
class WatcherFailure:
    """A watcher raised while handling an event."""

    watcher: str
    error: DispatchError


@dataclass
class Dispatch:
    """Outcome of one successful publish."""

    event: Event
    notified: list[str] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
    failures: list[WatcherFailure] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True when no watcher failed."""
        return not self.failures


class EventBus:
    """
    Routes events to subscribed watchers, applying transfers first.

    The bus references watchers, it does not own them. The same watcher
    may be subscribed under several event types.
    """

    def __init__(self, ledger: OwnershipLedger) -> None:
        self._ledger = ledger
        self._subscriptions: dict[EventType, list[Watcher]] = {t: [] for t in EventType}
        self._history: list[Event] = []

    @property
    def ledger(self) -> OwnershipLedger:
        return self._ledger

    def subscribe(self, event_type: EventType | str, watcher: Watcher) -> Watcher:
        """Append ``watcher`` to the subscribers of ``event_type``.

        Raises:
            InvalidOperation: unknown event type
        """
        key = EventType.parse(event_type)
        if not isinstance(watcher, Watcher):
            raise TypeError(f"{watcher!r} does not implement the Watcher protocol")
        with self._ledger.lock:
            self._subscriptions[key].append(watcher)
        logger.debug("watcher_subscribed", event_type=key.value, watcher=watcher.name)
        return watcher

    def unsubscribe(self, event_type: EventType | str, watcher: Watcher) -> bool:
        """Remove the first subscription of ``watcher``; return whether one existed."""
        key = EventType.parse(event_type)
        with self._ledger.lock:
            subscribers = self._subscriptions[key]
            for index, subscribed in enumerate(subscribers):
                if subscribed is watcher:
                    del subscribers[index]
                    return True
        return False

    def subscribers(self, event_type: EventType | str) -> list[Watcher]:
        return list(self._subscriptions[EventType.parse(event_type)])

    def publish(self, event: Event) -> Result[Dispatch]:
        """Apply ``event`` to the ledger if needed, then notify subscribers."""
        if not isinstance(event, EVENT_CLASSES):
            error = MalformedEvent(
                f"Not an event: {event!r}",
                field="event",
                value=event,
                constraint="Publication | Transfer",
            )
            logger.warning("publish_rejected", reason="malformed", error=error.message)
            return Err(error)

        with self._ledger.lock, LogContext(event_id=event.event_id, event_type=event.event_type.value):
            match event:
                case Transfer(seller=seller, buyer=buyer, target=target, percentage=percentage):
                    try:
                        self._ledger.transfer(seller, buyer, target, percentage)
                    except VigieError as error:
                        error.with_context(event_type=event.event_type.value, event_id=event.event_id)
                        logger.warning("publish_rejected", reason=type(error).__name__, error=error.to_dict())
                        return Err(error)

            self._history.append(event)
            dispatch = self._dispatch(event)

        logger.info(
            "event_dispatched",
            event_id=event.event_id,
            event_type=event.event_type.value,
            notified=len(dispatch.notified),
            alerts=len(dispatch.alerts),
            failures=len(dispatch.failures),
        )
        return Ok(dispatch)

    def history(self, event_type: EventType | str | None = None) -> list[Event]:
        """Events that were dispatched, oldest first."""
        if event_type is None:
            return list(self._history)
        key = EventType.parse(event_type)
        return [e for e in self._history if e.event_type is key]

    def _dispatch(self, event: Event) -> Dispatch:
        dispatch = Dispatch(event=event)
        for watcher in list(self._subscriptions[event.event_type]):
            try:
                alerts = watcher.handle(event)
            except Exception as exc:
                error = DispatchError(
                    f"Watcher {watcher.name} failed: {exc}",
                    cause=exc,
                ).with_context(event_type=event.event_type.value, event_id=event.event_id)
                logger.warning("watcher_failed", watcher=watcher.name, error=str(exc))
                dispatch.failures.append(WatcherFailure(watcher=watcher.name, error=error))
                continue
            dispatch.notified.append(watcher.name)
            dispatch.alerts.extend(alerts)
        return dispatch


__all__ = ["EventBus", "Dispatch", "WatcherFailure"]
