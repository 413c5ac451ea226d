"""
Tests for vigie.framework.bus - EventBus.

Covers subscription routing, dispatch order, the transactional ledger
pre-step for transfers, and isolation of failing watchers.
"""

import threading

import pytest

from vigie.core.errors import (
    DispatchError,
    InsufficientShare,
    InvalidOperation,
    MalformedEvent,
    UnknownEntity,
)
from vigie.core.result import Err, Ok
from vigie.domain.entities import Entity
from vigie.domain.events import EventType, Publication, Transfer
from vigie.framework.bus import Dispatch, EventBus
from vigie.framework.watchers import MediaWatcher


class Recorder:
    """Watcher that records calls into a shared journal."""

    def __init__(self, name, journal, alerts=None):
        self.name = name
        self._journal = journal
        self._alerts = alerts or []

    def handle(self, event):
        self._journal.append((self.name, event))
        return list(self._alerts)


class Exploding:
    name = "exploding"

    def handle(self, event):
        raise RuntimeError("watcher bug")


@pytest.fixture
def journal():
    return []


@pytest.fixture
def owned(ledger, alice, bob, le_monde):
    """Alice holds 60% and Bob 30% of Le Monde."""
    ledger.grant(alice, le_monde, 60)
    ledger.grant(bob, le_monde, 30)
    return ledger


class TestSubscribe:
    def test_subscribe_returns_watcher(self, bus, journal):
        watcher = Recorder("r", journal)
        assert bus.subscribe(EventType.PUBLICATION, watcher) is watcher
        assert bus.subscribers("publication") == [watcher]

    def test_event_type_is_case_insensitive(self, bus, journal):
        watcher = Recorder("r", journal)
        bus.subscribe("TRANSFER", watcher)
        assert bus.subscribers(EventType.TRANSFER) == [watcher]
        assert bus.subscribers("Publication") == []

    def test_unknown_event_type(self, bus, journal):
        with pytest.raises(InvalidOperation):
            bus.subscribe("merger", Recorder("r", journal))

    def test_non_watcher_refused(self, bus):
        with pytest.raises(TypeError):
            bus.subscribe("publication", object())

    def test_same_watcher_under_several_types(self, bus, journal):
        watcher = Recorder("r", journal)
        bus.subscribe("publication", watcher)
        bus.subscribe("transfer", watcher)
        assert bus.subscribers("publication") == [watcher]
        assert bus.subscribers("transfer") == [watcher]

    def test_unsubscribe(self, bus, journal):
        watcher = Recorder("r", journal)
        bus.subscribe("publication", watcher)
        assert bus.unsubscribe("publication", watcher) is True
        assert bus.unsubscribe("publication", watcher) is False
        assert bus.subscribers("publication") == []

    def test_subscribers_is_a_copy(self, bus, journal):
        bus.subscribe("publication", Recorder("r", journal))
        bus.subscribers("publication").clear()
        assert len(bus.subscribers("publication")) == 1


class TestPublishPublication:
    def test_dispatches_in_subscription_order(self, bus, journal):
        for name in ("first", "second", "third"):
            bus.subscribe("publication", Recorder(name, journal))
        event = Publication("hello")

        result = bus.publish(event)

        assert isinstance(result, Ok)
        assert [name for name, _ in journal] == ["first", "second", "third"]
        assert all(e is event for _, e in journal)
        assert result.unwrap().notified == ["first", "second", "third"]

    def test_only_matching_type_is_notified(self, bus, journal):
        bus.subscribe("transfer", Recorder("transfers", journal))
        bus.publish(Publication("hello"))
        assert journal == []

    def test_no_subscribers_is_ok(self, bus):
        event = Publication("nobody listens")
        dispatch = bus.publish(event).unwrap()
        assert dispatch == Dispatch(event=event)
        assert bus.history() == [event]

    def test_alerts_are_collected(self, bus, journal):
        bus.subscribe("publication", Recorder("a", journal, alerts=["x"]))
        bus.subscribe("publication", Recorder("b", journal, alerts=["y", "z"]))
        assert bus.publish(Publication("p")).unwrap().alerts == ["x", "y", "z"]

    def test_publication_leaves_ledger_untouched(self, bus, owned, le_monde):
        before = [(r.pair, r.percentage) for r in owned]
        bus.publish(Publication("Le Monde", source=le_monde))
        assert [(r.pair, r.percentage) for r in owned] == before


class TestPublishTransfer:
    def test_applies_transfer_before_dispatch(self, bus, owned, alice, holding, le_monde):
        seen = []

        class LedgerProbe:
            name = "probe"

            def handle(self, event):
                seen.append(owned.share(holding, le_monde))
                return []

        bus.subscribe("transfer", LedgerProbe())
        result = bus.publish(Transfer(buyer=holding, seller=alice, target=le_monde, percentage=20))

        assert result.is_ok()
        assert seen == [20.0]
        assert owned.share(alice, le_monde) == 40.0

    def test_failed_transfer_notifies_nobody(self, bus, owned, bob, holding, le_monde, journal):
        bus.subscribe("transfer", Recorder("r", journal))
        before = [(r.pair, r.percentage) for r in owned]
        event = Transfer(buyer=holding, seller=bob, target=le_monde, percentage=50)

        result = bus.publish(event)

        assert isinstance(result, Err)
        error = result.unwrap_err()
        assert isinstance(error, InsufficientShare)
        assert error.context.event_id == event.event_id
        assert error.context.event_type == "transfer"
        assert journal == []
        assert bus.history() == []
        assert [(r.pair, r.percentage) for r in owned] == before

    def test_unregistered_party_is_refused(self, bus, owned, alice, le_monde, journal):
        bus.subscribe("transfer", Recorder("r", journal))
        result = bus.publish(Transfer(Entity.organization("Ghost"), alice, le_monde, 5))
        assert isinstance(result.unwrap_err(), UnknownEntity)
        assert journal == []

    def test_target_as_buyer_is_refused(self, bus, owned, alice, le_monde, journal):
        bus.subscribe("transfer", Recorder("r", journal))
        before = [(r.pair, r.percentage) for r in owned]

        result = bus.publish(Transfer(buyer=le_monde, seller=alice, target=le_monde, percentage=20))

        assert isinstance(result.unwrap_err(), InvalidOperation)
        assert journal == []
        assert bus.history() == []
        assert owned.share(le_monde, le_monde) == 0.0
        assert [(r.pair, r.percentage) for r in owned] == before

    def test_history_by_type(self, bus, owned, alice, holding, le_monde):
        pub = Publication("p")
        transfer = Transfer(holding, alice, le_monde, 5)
        bus.publish(pub)
        bus.publish(transfer)
        assert bus.history() == [pub, transfer]
        assert bus.history("transfer") == [transfer]
        assert bus.history(EventType.PUBLICATION) == [pub]

    def test_media_watcher_end_to_end(self, bus, owned, sink, alice, holding, le_monde):
        watcher = bus.subscribe("transfer", MediaWatcher([le_monde], sink=sink))
        dispatch = bus.publish(Transfer(holding, alice, le_monde, 20)).unwrap()
        assert len(dispatch.alerts) == 1
        assert sink.all() == dispatch.alerts
        assert dispatch.notified == [watcher.name]


class TestFailureIsolation:
    def test_failing_watcher_does_not_stop_others(self, bus, journal):
        bus.subscribe("publication", Recorder("before", journal))
        bus.subscribe("publication", Exploding())
        bus.subscribe("publication", Recorder("after", journal))

        dispatch = bus.publish(Publication("p")).unwrap()

        assert [name for name, _ in journal] == ["before", "after"]
        assert dispatch.notified == ["before", "after"]
        assert not dispatch.clean
        failure = dispatch.failures[0]
        assert failure.watcher == "exploding"
        assert isinstance(failure.error, DispatchError)
        assert isinstance(failure.error.cause, RuntimeError)

    def test_failure_is_logged(self, bus, captured_logs):
        bus.subscribe("publication", Exploding())
        bus.publish(Publication("p"))
        failures = [e for e in captured_logs if e["event"] == "watcher_failed"]
        assert failures[0]["watcher"] == "exploding"
        assert failures[0]["log_level"] == "warning"

    def test_failed_watcher_does_not_undo_transfer(self, bus, owned, alice, holding, le_monde):
        bus.subscribe("transfer", Exploding())
        dispatch = bus.publish(Transfer(holding, alice, le_monde, 10)).unwrap()
        assert len(dispatch.failures) == 1
        assert owned.share(holding, le_monde) == 10.0


class TestMalformedInput:
    @pytest.mark.parametrize("event", [None, "transfer", {"type": "publication"}])
    def test_non_events_are_refused(self, bus, event):
        result = bus.publish(event)
        assert isinstance(result.unwrap_err(), MalformedEvent)
        assert bus.history() == []


class TestConcurrency:
    def test_concurrent_transfers_keep_totals(self, store, ledger, bus):
        sellers = [store.register(Entity.organization(f"Seller {i}")) for i in range(4)]
        buyer = store.register(Entity.organization("Buyer"))
        target = store.register(Entity.media("Target"))
        for seller in sellers:
            ledger.grant(seller, target, 25)

        def sell(seller):
            for _ in range(25):
                bus.publish(Transfer(buyer, seller, target, 1))

        threads = [threading.Thread(target=sell, args=(s,)) for s in sellers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert ledger.share(buyer, target) == pytest.approx(100.0)
        assert ledger.total_held(target) == pytest.approx(100.0)
        assert len(bus.history("transfer")) == 100
