"""Domain model: entities, the ownership ledger, and events."""

from vigie.domain.entities import Entity, EntityKind, EntityStore
from vigie.domain.events import EVENT_CLASSES, Event, EventType, Publication, Transfer
from vigie.domain.ownership import FULL_OWNERSHIP, OwnershipLedger, OwnershipRecord

__all__ = [
    "Entity",
    "EntityKind",
    "EntityStore",
    "EVENT_CLASSES",
    "Event",
    "EventType",
    "Publication",
    "Transfer",
    "FULL_OWNERSHIP",
    "OwnershipLedger",
    "OwnershipRecord",
]
