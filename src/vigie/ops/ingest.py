"""
Ingestion entry point for the loading collaborator.

The collaborator that reads the source files hands over two pre-validated
streams: entity records and ``(owner, target, percentage)`` triples keyed by
entity name. ``ingest`` registers the entities, then grants each
ownership. A record the core refuses is captured as a :class:`Reject` and
logged; ingestion never stops on a single bad record.

Manifesto:
    Every reject answers:
    - **Where?** stage (ENTITY or OWNERSHIP)
    - **Why?** reason_code (the error class) + reason_detail
    - **What?** the raw record, for reproduction

Usage::

    report = ingest(
        store,
        ledger,
        entities=[Entity.person("Vincent Bolloré"), Entity.media("CNews", "TV")],
        ownerships=[("Vincent Bolloré", "CNews", 100.0)],
    )
    for reject in report.rejected:
        print(reject.reason_code, reject.reason_detail)

Tags:
    vigie, ingestion, reject, data-quality
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from vigie.core.errors import VigieError
from vigie.core.logging import get_logger
from vigie.core.result import Err, Ok, try_result
from vigie.domain.entities import Entity, EntityStore
from vigie.domain.ownership import OwnershipLedger, OwnershipRecord

logger = get_logger(__name__)

OwnershipRow = tuple[str, str, float]


@dataclass(frozen=True)
class Reject:
    """
    A record the core refused, with its classification.

    Attributes:
        stage: ``ENTITY`` or ``OWNERSHIP``
        reason_code: Error class name (``UnknownEntity``, ``InvariantViolation``, ...)
        reason_detail: Human-readable explanation
        raw_data: The record as received
        error: The error raised by the core
    """

    stage: str
    reason_code: str
    reason_detail: str
    raw_data: Any = None
    error: VigieError | None = field(default=None, compare=False)


@dataclass
class IngestReport:
    """Counts and rejects from one ingestion run."""

    entities_registered: int = 0
    grants_applied: int = 0
    rejected: list[Reject] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

    def _reject(self, stage: str, error: VigieError, raw: Any) -> None:
        reject = Reject(
            stage=stage,
            reason_code=type(error).__name__,
            reason_detail=error.message,
            raw_data=raw,
            error=error,
        )
        self.rejected.append(reject)
        logger.warning(
            "ingest_rejected",
            stage=stage,
            reason_code=reject.reason_code,
            reason_detail=reject.reason_detail,
        )


def _grant_row(store: EntityStore, ledger: OwnershipLedger, row: OwnershipRow) -> OwnershipRecord:
    owner_name, target_name, percentage = row
    return ledger.grant(store.get(owner_name), store.get(target_name), percentage)


def ingest(
    store: EntityStore,
    ledger: OwnershipLedger,
    entities: Iterable[Entity],
    ownerships: Iterable[OwnershipRow],
) -> IngestReport:
    """Register ``entities`` in ``store``, then grant each ownership row."""
    report = IngestReport()

    for entity in entities:
        match try_result(lambda: store.register(entity)):
            case Ok():
                report.entities_registered += 1
            case Err(error):
                report._reject("ENTITY", error, entity)

    for row in ownerships:
        match try_result(lambda: _grant_row(store, ledger, row)):
            case Ok():
                report.grants_applied += 1
            case Err(error):
                report._reject("OWNERSHIP", error, row)

    logger.info(
        "ingest_completed",
        entities=report.entities_registered,
        grants=report.grants_applied,
        rejected=len(report.rejected),
    )
    return report


__all__ = ["Reject", "IngestReport", "OwnershipRow", "ingest"]
