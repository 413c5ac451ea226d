"""Ownership rankings and entity profiles."""

from __future__ import annotations

from dataclasses import dataclass

from vigie.domain.entities import Entity, EntityKind, EntityStore
from vigie.domain.ownership import OwnershipLedger, OwnershipRecord


@dataclass(frozen=True)
class EntityProfile:
    """An entity with the records naming it as target (owners) and as owner (holdings)."""

    entity: Entity
    owners: list[OwnershipRecord]
    holdings: list[OwnershipRecord]

    @property
    def total_owned(self) -> float:
        return sum(r.percentage for r in self.owners)


def rank_by_holdings(ledger: OwnershipLedger, kind: EntityKind) -> list[tuple[Entity, int]]:
    """Entities by number of distinct ``kind`` targets they hold a positive share of.

    Sorted by descending count, then by name. Entities holding none are left out.
    """
    counts: dict[Entity, int] = {}
    for record in ledger.records():
        if record.target.kind is kind and record.percentage > ledger.tolerance:
            counts[record.owner] = counts.get(record.owner, 0) + 1

    ranking = list(counts.items())
    ranking.sort(key=lambda item: (-item[1], item[0].key))
    return ranking


def rank_by_media_held(ledger: OwnershipLedger) -> list[tuple[Entity, int]]:
    return rank_by_holdings(ledger, EntityKind.MEDIA)


def rank_by_organizations_held(ledger: OwnershipLedger) -> list[tuple[Entity, int]]:
    return rank_by_holdings(ledger, EntityKind.ORGANIZATION)


def profile(store: EntityStore, ledger: OwnershipLedger, name: str) -> EntityProfile:
    """Look up ``name`` and collect its owners and holdings.

    Raises:
        UnknownEntity: no entity is registered under ``name``
    """
    entity = store.get(name)
    return EntityProfile(
        entity=entity,
        owners=ledger.records_of(entity),
        holdings=ledger.records_for(entity),
    )


__all__ = [
    "EntityProfile",
    "rank_by_holdings",
    "rank_by_media_held",
    "rank_by_organizations_held",
    "profile",
]
