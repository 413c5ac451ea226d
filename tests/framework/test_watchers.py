"""Tests for vigie.framework.watchers - PersonWatcher and MediaWatcher."""

from datetime import UTC, datetime

import pytest

from vigie.core.errors import InvalidOperation
from vigie.domain.entities import Entity, EntityKind
from vigie.domain.events import Publication, Transfer
from vigie.framework.alerts import AlertSeverity
from vigie.framework.watchers import BaseWatcher, MediaWatcher, PersonWatcher, Watcher, watched_entities

DAY = datetime(2024, 3, 14, 8, 0, tzinfo=UTC)


def reasons(alerts):
    return [a.metadata["reason"] for a in alerts]


class TestWatcherProtocol:
    def test_concrete_watchers_satisfy_protocol(self, ada, le_monde):
        assert isinstance(PersonWatcher([ada]), Watcher)
        assert isinstance(MediaWatcher([le_monde]), Watcher)

    def test_duck_typed_watcher(self):
        class Minimal:
            name = "minimal"

            def handle(self, event):
                return []

        assert isinstance(Minimal(), Watcher)

    def test_default_names_are_unique(self, ada):
        first, second = PersonWatcher([ada]), PersonWatcher([ada])
        assert first.name != second.name
        assert first.name.startswith("person-watcher-")

    def test_explicit_name(self, le_monde):
        assert MediaWatcher([le_monde], name="press-desk").name == "press-desk"


class TestWatchedEntities:
    def test_deduplicates_preserving_order(self, ada, alice):
        assert watched_entities([ada, alice, Entity.person("ADA LOVELACE")], EntityKind.PERSON) == (ada, alice)

    def test_rejects_wrong_kind(self, ada, le_monde):
        with pytest.raises(InvalidOperation):
            watched_entities([ada, le_monde], EntityKind.PERSON)

    def test_rejects_non_entities(self):
        with pytest.raises(InvalidOperation):
            watched_entities(["Le Monde"], EntityKind.MEDIA)


class TestPersonWatcher:
    def test_content_mention(self, ada):
        watcher = PersonWatcher([ada])
        alerts = watcher.handle(Publication("An interview with ADA LOVELACE", timestamp=DAY))

        assert reasons(alerts) == ["content"]
        alert = alerts[0]
        assert alert.subject == "Ada Lovelace"
        assert alert.source == watcher.name
        assert alert.severity is AlertSeverity.INFO
        assert alert.message == "Publication about Ada Lovelace on 2024-03-14: An interview with ADA LOVELACE"

    def test_mention_list(self, ada, le_monde):
        watcher = PersonWatcher([ada])
        alerts = watcher.handle(Publication("Budget vote", source=le_monde, mentions=(ada,), timestamp=DAY))
        assert reasons(alerts) == ["mention"]
        assert "mentioning Ada Lovelace" in alerts[0].message

    def test_content_and_mention_both_fire(self, ada):
        watcher = PersonWatcher([ada])
        alerts = watcher.handle(Publication("Ada Lovelace wins", mentions=(ada,)))
        assert reasons(alerts) == ["content", "mention"]

    def test_irrelevant_publication(self, ada, le_monde):
        watcher = PersonWatcher([ada])
        event = Publication("Weather report", source=le_monde)
        assert watcher.handle(event) == []
        assert watcher.history == [event]

    def test_each_person_checked_independently(self, ada, alice):
        watcher = PersonWatcher([ada, alice])
        alerts = watcher.handle(Publication("Ada Lovelace meets Alice Martin"))
        assert [a.subject for a in alerts] == ["Ada Lovelace", "Alice Martin"]

    def test_owned_source(self, ledger, ada, le_monde, cnews):
        ledger.grant(ada, le_monde, 40)
        watcher = PersonWatcher([ada], ledger=ledger)

        alerts = watcher.handle(Publication("Editorial", source=le_monde, timestamp=DAY))
        assert reasons(alerts) == ["owned_source"]
        assert alerts[0].severity is AlertSeverity.WARNING
        assert alerts[0].message == "Publication by Le Monde, a media owned by Ada Lovelace: Editorial"

        assert watcher.handle(Publication("Other", source=cnews)) == []

    def test_owned_source_requires_positive_share(self, ledger, ada, bob, le_monde):
        ledger.grant(ada, le_monde, 10)
        ledger.transfer(ada, bob, le_monde, 10)
        watcher = PersonWatcher([ada], ledger=ledger)
        assert watcher.handle(Publication("Editorial", source=le_monde)) == []

    def test_owned_source_ignored_without_ledger(self, ledger, ada, le_monde):
        ledger.grant(ada, le_monde, 40)
        watcher = PersonWatcher([ada])
        assert watcher.handle(Publication("Editorial", source=le_monde)) == []

    def test_mention_shares(self, ledger, ada, le_monde, cnews):
        ledger.grant(ada, le_monde, 40)
        ledger.grant(ada, cnews, 100)
        watcher = PersonWatcher([ada], ledger=ledger)

        assert watcher.mention_shares() == {}
        for source in (le_monde, cnews, cnews, cnews):
            watcher.handle(Publication("x", source=source))

        assert watcher.mention_shares() == {"Le Monde": 25.0, "CNews": 75.0}

    def test_transfers_are_ignored(self, ada, alice, bob, le_monde):
        watcher = PersonWatcher([ada])
        event = Transfer(bob, alice, le_monde, 5)
        assert watcher.handle(event) == []
        assert watcher.history == [event]

    def test_forwards_to_sink(self, sink, ada):
        watcher = PersonWatcher([ada], sink=sink)
        alerts = watcher.handle(Publication("Ada Lovelace again"))
        assert sink.all() == alerts
        assert watcher.alerts == alerts

    def test_rejects_non_persons(self, le_monde):
        with pytest.raises(InvalidOperation):
            PersonWatcher([le_monde])


class TestMediaWatcher:
    def test_one_alert_per_watched_transfer(self, alice, bob, le_monde):
        watcher = MediaWatcher([le_monde])
        event = Transfer(buyer=bob, seller=alice, target=le_monde, percentage=20, timestamp=DAY)

        alerts = watcher.handle(event)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.event is event
        assert alert.subject == "Le Monde"
        assert alert.severity is AlertSeverity.WARNING
        assert alert.message == (
            "Transfer concerning Le Monde on 2024-03-14: "
            "Bob Durand acquired 20% of Le Monde from Alice Martin"
        )
        assert alert.metadata == {"buyer": "Bob Durand", "seller": "Alice Martin", "percentage": 20.0}

    def test_unwatched_target(self, alice, bob, le_monde, cnews):
        watcher = MediaWatcher([le_monde])
        event = Transfer(bob, alice, cnews, 20)
        assert watcher.handle(event) == []
        assert watcher.history == [event]

    def test_publications_are_ignored(self, le_monde):
        watcher = MediaWatcher([le_monde])
        assert watcher.handle(Publication("Le Monde changes hands", source=le_monde)) == []

    def test_history_accumulates(self, alice, bob, le_monde):
        watcher = MediaWatcher([le_monde])
        events = [Transfer(bob, alice, le_monde, 1), Transfer(alice, bob, le_monde, 1)]
        for event in events:
            watcher.handle(event)
        assert watcher.history == events
        assert len(watcher.alerts) == 2

    def test_rejects_non_media(self, ada):
        with pytest.raises(InvalidOperation):
            MediaWatcher([ada])


class TestBaseWatcher:
    def test_subclass_hooks(self, ada):
        class Echo(BaseWatcher):
            kind_label = "echo"

            def evaluate(self, event):
                return []

        watcher = Echo()
        event = Publication("hello")
        assert watcher.handle(event) == []
        assert watcher.history == [event]
        assert watcher.name.startswith("echo-")
        assert repr(watcher) == f"Echo(name={watcher.name!r})"

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            BaseWatcher()
