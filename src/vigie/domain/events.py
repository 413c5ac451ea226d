"""
Domain events: a closed union of publications and transfers.

Each variant is a frozen dataclass with typed payload fields, validated at
construction. Dispatch code matches on the variant class instead of
inspecting payload types at runtime::

    match event:
        case Transfer(seller=s, buyer=b, target=t, percentage=p):
            ...
        case Publication(content=c):
            ...

Tags:
    vigie, domain, events, tagged-union, value-objects

Doc-Types:
    api-reference
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from numbers import Real
from typing import ClassVar

from vigie.core.errors import InvalidOperation, MalformedEvent
from vigie.core.identity import new_event_id, utc_now
from vigie.domain.entities import Entity, EntityStore


class EventType(str, Enum):
    """Finite set of event types watchers can subscribe to."""

    PUBLICATION = "publication"
    TRANSFER = "transfer"

    @classmethod
    def parse(cls, value: EventType | str) -> EventType:
        """Accept an ``EventType`` or a case-insensitive string."""
        if isinstance(value, EventType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidOperation(
            f"Unknown event type: {value!r}",
            field="event_type",
            value=value,
            constraint=" | ".join(t.value for t in cls),
        )


def _require_entity(name: str, value: object) -> None:
    if not isinstance(value, Entity):
        raise MalformedEvent(
            f"{name} must be an Entity",
            field=name,
            value=value,
        )


@dataclass(frozen=True)
class Publication:
    """
    Content issued by a source, possibly mentioning entities.

    Attributes:
        content: Free text of the publication
        source: Issuing entity, usually a media outlet
        publication_type: article, report, interview, ...
        mentions: Entities explicitly mentioned
        timestamp: When the publication happened (UTC)
        event_id: Unique identifier
    """

    event_type: ClassVar[EventType] = EventType.PUBLICATION

    content: str
    source: Entity | None = None
    publication_type: str = "article"
    mentions: tuple[Entity, ...] = ()
    timestamp: datetime = field(default_factory=utc_now)
    event_id: str = field(default_factory=new_event_id)

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            raise MalformedEvent("Publication content must be a string", field="content", value=self.content)
        if self.source is not None:
            _require_entity("source", self.source)
        if not isinstance(self.publication_type, str) or not self.publication_type.strip():
            raise MalformedEvent(
                "Publication type must be a non-blank string",
                field="publication_type",
                value=self.publication_type,
            )
        if isinstance(self.mentions, (str, bytes)):
            raise MalformedEvent("Mentions must be a sequence of entities", field="mentions", value=self.mentions)
        mentions = tuple(self.mentions)
        for mentioned in mentions:
            _require_entity("mentions", mentioned)
        object.__setattr__(self, "mentions", mentions)
        if not isinstance(self.timestamp, datetime):
            raise MalformedEvent("Timestamp must be a datetime", field="timestamp", value=self.timestamp)

    def summary(self) -> str:
        return self.content


@dataclass(frozen=True)
class Transfer:
    """
    ``buyer`` acquires ``percentage`` percent of ``target`` from ``seller``.

    Attributes:
        buyer: Acquiring entity
        seller: Selling entity
        target: Entity whose shares change hands
        percentage: Share transferred, in (0, 100]
        note: Optional free-text description
        timestamp: When the transfer happened (UTC)
        event_id: Unique identifier
    """

    event_type: ClassVar[EventType] = EventType.TRANSFER

    buyer: Entity
    seller: Entity
    target: Entity
    percentage: float
    note: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    event_id: str = field(default_factory=new_event_id)

    def __post_init__(self) -> None:
        _require_entity("buyer", self.buyer)
        _require_entity("seller", self.seller)
        _require_entity("target", self.target)
        pct = self.percentage
        if isinstance(pct, bool) or not isinstance(pct, Real):
            raise MalformedEvent("Percentage must be a real number", field="percentage", value=pct)
        pct = float(pct)
        if not math.isfinite(pct) or not 0.0 < pct <= 100.0:
            raise MalformedEvent(
                f"Percentage {pct:g} outside (0, 100]",
                field="percentage",
                value=self.percentage,
                constraint="(0, 100]",
            )
        object.__setattr__(self, "percentage", pct)
        if not isinstance(self.timestamp, datetime):
            raise MalformedEvent("Timestamp must be a datetime", field="timestamp", value=self.timestamp)

    @classmethod
    def between(
        cls,
        store: EntityStore,
        *,
        buyer: str,
        seller: str,
        target: str,
        percentage: float,
        note: str | None = None,
    ) -> Transfer:
        """Build a transfer from entity names resolved through ``store``.

        Raises:
            UnknownEntity: a name resolves to no registered entity
            MalformedEvent: the percentage is out of range
        """
        return cls(
            buyer=store.get(buyer),
            seller=store.get(seller),
            target=store.get(target),
            percentage=percentage,
            note=note,
        )

    def describe(self) -> str:
        return (
            f"{self.buyer.name} acquired {self.percentage:g}% of "
            f"{self.target.name} from {self.seller.name}"
        )

    def summary(self) -> str:
        return self.note or self.describe()


Event = Publication | Transfer

EVENT_CLASSES: tuple[type, ...] = (Publication, Transfer)


__all__ = ["EventType", "Publication", "Transfer", "Event", "EVENT_CLASSES"]
