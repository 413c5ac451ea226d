"""Operations built on the core: ingestion and ownership reports."""

from vigie.ops.ingest import IngestReport, Reject, ingest
from vigie.ops.rankings import (
    EntityProfile,
    profile,
    rank_by_holdings,
    rank_by_media_held,
    rank_by_organizations_held,
)

__all__ = [
    "IngestReport",
    "Reject",
    "ingest",
    "EntityProfile",
    "profile",
    "rank_by_holdings",
    "rank_by_media_held",
    "rank_by_organizations_held",
]
