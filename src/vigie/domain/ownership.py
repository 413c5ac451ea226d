"""
Ownership ledger with invariant enforcement.

The ledger holds one record per (owner, target) pair and guarantees that,
after every successful operation, no target is held above 100% in total.
Both mutating operations follow the same discipline: validate everything,
then mutate. A refused operation raises before the first write, so the
ledger is never observed in a partial state.

Manifesto:
    - **Validate, then mutate:** Every precondition is checked up front
    - **One record per pair:** Repeated grants accumulate in place
    - **Tolerance-aware boundary:** ``total <= 100 + tolerance``
    - **Deterministic reads:** Queries return records in insertion order

Architecture:
    ::

        grant(owner, target, pct)
          ├── check 0 <= pct <= 100, owner != target   → InvalidOperation
          ├── check owner/target registered            → UnknownEntity
          ├── check total_held(target) + pct <= 100    → InvariantViolation
          └── accumulate into (owner, target) record

        transfer(seller, buyer, target, pct)
          ├── check 0 < pct <= 100, seller != buyer,
          │   target not a party                       → InvalidOperation
          ├── check seller/buyer/target registered     → UnknownEntity
          ├── check seller holds >= pct - tolerance    → InsufficientShare
          ├── moved = min(pct, held)
          ├── seller record  -= moved
          └── buyer record   += moved  (created if absent)

Examples:
    >>> ledger = OwnershipLedger()
    >>> a, m = Entity.person("A"), Entity.media("M")
    >>> ledger.grant(a, m, 60).percentage
    60.0
    >>> ledger.total_held(m)
    60.0

Tags:
    vigie, domain, ownership, ledger, invariant, transaction

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
import threading
from collections.abc import Iterator
from dataclasses import dataclass, replace
from numbers import Real
from typing import TYPE_CHECKING

from vigie.core.errors import InsufficientShare, InvalidOperation, InvariantViolation
from vigie.core.logging import get_logger
from vigie.domain.entities import Entity, EntityStore

if TYPE_CHECKING:
    from vigie.core.settings import VigieSettings

logger = get_logger(__name__)

FULL_OWNERSHIP = 100.0


@dataclass(frozen=True)
class OwnershipRecord:
    """``owner`` holds ``percentage`` percent of ``target``."""

    owner: Entity
    target: Entity
    percentage: float

    @property
    def pair(self) -> tuple[Entity, Entity]:
        """Ledger key: one record exists per (owner, target) pair."""
        return (self.owner, self.target)

    def __str__(self) -> str:
        return f"{self.owner.name} holds {self.percentage:g}% of {self.target.name}"


def _check_percentage(value: object, *, allow_zero: bool) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidOperation(
            "Percentage must be a real number",
            field="percentage",
            value=value,
            constraint="real",
        )
    pct = float(value)
    low_ok = pct >= 0.0 if allow_zero else pct > 0.0
    if not math.isfinite(pct) or not low_ok or pct > FULL_OWNERSHIP:
        bounds = "[0, 100]" if allow_zero else "(0, 100]"
        raise InvalidOperation(
            f"Percentage {pct:g} outside {bounds}",
            field="percentage",
            value=value,
            constraint=bounds,
        )
    return pct


class OwnershipLedger:
    """
    In-memory set of ownership records.

    Args:
        store: When given, every entity passed to ``grant``/``transfer``
            must be registered in it.
        tolerance: Slack allowed on the 100% boundary and on share
            comparisons.
        prune_empty_records: Remove a record once a transfer brings its
            percentage to zero.

    ``grant`` and ``transfer`` run inside :attr:`lock`, a re-entrant lock
    that :class:`~vigie.framework.bus.EventBus` also holds for a whole
    publish cycle.
    """

    def __init__(
        self,
        store: EntityStore | None = None,
        *,
        tolerance: float = 1e-9,
        prune_empty_records: bool = False,
    ) -> None:
        if tolerance < 0:
            raise InvalidOperation("Tolerance must be non-negative", field="tolerance", value=tolerance)
        self._store = store
        self._tolerance = tolerance
        self._prune = prune_empty_records
        self._records: dict[tuple[Entity, Entity], OwnershipRecord] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: VigieSettings, store: EntityStore | None = None) -> OwnershipLedger:
        return cls(
            store,
            tolerance=settings.percentage_tolerance,
            prune_empty_records=settings.prune_empty_records,
        )

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def store(self) -> EntityStore | None:
        return self._store

    # ── Mutations ────────────────────────────────────────────────

    def grant(self, owner: Entity, target: Entity, percentage: float) -> OwnershipRecord:
        """Add ``percentage`` of ``target`` to ``owner``'s holding.

        Raises:
            InvalidOperation: percentage outside [0, 100] or owner == target
            UnknownEntity: an entity is not registered in the attached store
            InvariantViolation: the target's total would exceed 100%
        """
        pct = _check_percentage(percentage, allow_zero=True)
        if owner == target:
            raise InvalidOperation(
                f"{owner.name} cannot own shares of itself",
                constraint="owner != target",
            ).with_context(owner=owner.key, target=target.key)

        with self._lock:
            self._require(owner, target)
            current = self.total_held(target)
            if current + pct > FULL_OWNERSHIP + self._tolerance:
                logger.warning(
                    "grant_rejected",
                    owner=owner.key,
                    target=target.key,
                    percentage=pct,
                    current_total=current,
                )
                raise InvariantViolation(
                    f"Granting {pct:g}% of {target.name} would bring its total to "
                    f"{current + pct:g}% (> 100%)",
                    current_total=current,
                    requested=pct,
                ).with_context(owner=owner.key, target=target.key)

            existing = self._records.get((owner, target))
            if existing is None:
                record = OwnershipRecord(owner, target, pct)
            else:
                record = replace(existing, percentage=existing.percentage + pct)
            self._records[record.pair] = record

        logger.debug(
            "ownership_granted",
            owner=owner.key,
            target=target.key,
            percentage=pct,
            holding=record.percentage,
        )
        return record

    def transfer(
        self,
        seller: Entity,
        buyer: Entity,
        target: Entity,
        percentage: float,
    ) -> tuple[OwnershipRecord | None, OwnershipRecord]:
        """Move ``percentage`` of ``target`` from ``seller`` to ``buyer``.

        A seller holding slightly less than ``percentage`` (within
        tolerance) sells everything it holds; the buyer is credited with
        exactly what the seller lost, so a transfer never changes the
        target's total.

        Returns the seller's record after the sale (``None`` if it was
        pruned) and the buyer's record after the purchase.

        Raises:
            InvalidOperation: percentage outside (0, 100], seller == buyer,
                or seller/buyer is the target itself
            UnknownEntity: an entity is not registered in the attached store
            InsufficientShare: the seller holds less than ``percentage``
        """
        pct = _check_percentage(percentage, allow_zero=False)
        context = {"seller": seller.key, "buyer": buyer.key, "target": target.key}
        if seller == buyer:
            raise InvalidOperation(
                f"{seller.name} cannot sell to itself",
                constraint="seller != buyer",
            ).with_context(**context)
        if target in (seller, buyer):
            raise InvalidOperation(
                f"{target.name} cannot hold shares of itself",
                constraint="seller != target and buyer != target",
            ).with_context(**context)

        with self._lock:
            self._require(seller, buyer, target)
            held = self._records.get((seller, target))
            held_pct = held.percentage if held is not None else 0.0
            if held is None or held_pct < pct - self._tolerance:
                logger.warning("transfer_rejected", percentage=pct, held=held_pct, **context)
                raise InsufficientShare(
                    f"{seller.name} holds {held_pct:g}% of {target.name}, "
                    f"cannot sell {pct:g}%",
                    held=held_pct,
                    requested=pct,
                ).with_context(**context)

            # every precondition holds; the two writes below cannot fail
            moved = min(pct, held_pct)
            remaining = held_pct - moved
            seller_record: OwnershipRecord | None
            if self._prune and remaining <= self._tolerance:
                del self._records[(seller, target)]
                seller_record = None
            else:
                seller_record = replace(held, percentage=remaining)
                self._records[seller_record.pair] = seller_record

            existing = self._records.get((buyer, target))
            if existing is None:
                buyer_record = OwnershipRecord(buyer, target, moved)
            else:
                buyer_record = replace(existing, percentage=existing.percentage + moved)
            self._records[buyer_record.pair] = buyer_record

        logger.info("ownership_transferred", percentage=moved, **context)
        return seller_record, buyer_record

    # ── Queries ──────────────────────────────────────────────────

    def total_held(self, target: Entity) -> float:
        """Sum of all owners' percentages of ``target``."""
        return math.fsum(r.percentage for r in self._records.values() if r.target == target)

    def share(self, owner: Entity, target: Entity) -> float:
        record = self._records.get((owner, target))
        return record.percentage if record is not None else 0.0
    def records_for(self, owner: Entity) -> list[OwnershipRecord]:
        """Records whose owner is ``owner`` (its holdings)."""
        return [r for r in self._records.values() if r.owner == owner]

    def records_of(self, target: Entity) -> list[OwnershipRecord]:
        """Records whose target is ``target`` (its owners)."""
        return [r for r in self._records.values() if r.target == target]

    def records(self) -> list[OwnershipRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[OwnershipRecord]:
        return iter(self.records())

    # ── Internals ────────────────────────────────────────────────

    def _require(self, *entities: Entity) -> None:
        if self._store is None:
            return
        for entity in entities:
            self._store.require(entity)


__all__ = ["FULL_OWNERSHIP", "OwnershipRecord", "OwnershipLedger"]
