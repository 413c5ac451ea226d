"""Identity keys, name matching, and UTC timestamps.

Entity identity is case- and diacritic-insensitive: ``"Vincent Bolloré"``,
``"vincent bollore"`` and ``"  VINCENT   BOLLORÉ "`` are one entity.
"""

from __future__ import annotations

import unicodedata
import uuid
from datetime import UTC, datetime


def fold(text: str) -> str:
    """Strip combining marks and casefold, keeping whitespace as is."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def identity_key(name: str) -> str:
    """Canonical identity key for a display name."""
    return " ".join(fold(name).split())


def mentions_name(text: str, name: str) -> bool:
    """True if ``name`` occurs in ``text``, ignoring case, accents and spacing."""
    needle = identity_key(name)
    if not needle:
        return False
    return needle in identity_key(text)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def new_event_id() -> str:
    return uuid.uuid4().hex


__all__ = ["fold", "identity_key", "mentions_name", "utc_now", "new_event_id"]
