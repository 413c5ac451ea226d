"""Vigie Core -- domain-agnostic primitives shared by every layer.

Architecture::

    errors.py      Structured error hierarchy (VigieError, InvariantViolation, ...)
    result.py      Result[T] envelope (Ok / Err / try_result)
    logging.py     structlog configuration and LogContext
    settings.py    VigieSettings (pydantic-settings) and get_settings()
    identity.py    Identity keys, name matching, UTC helpers
"""

from vigie.core.errors import (
    DispatchError,
    DuplicateEntity,
    ErrorCategory,
    ErrorContext,
    InsufficientShare,
    InvalidOperation,
    InvariantViolation,
    LookupFailure,
    MalformedEntity,
    MalformedEvent,
    OwnershipError,
    UnknownEntity,
    ValidationError,
    VigieError,
)
from vigie.core.identity import identity_key, mentions_name, utc_now
from vigie.core.logging import LogContext, configure_logging, get_logger
from vigie.core.result import Err, Ok, Result, try_result
from vigie.core.settings import VigieSettings, get_settings

__all__ = [
    # errors
    "DispatchError",
    "DuplicateEntity",
    "ErrorCategory",
    "ErrorContext",
    "InsufficientShare",
    "InvalidOperation",
    "InvariantViolation",
    "LookupFailure",
    "MalformedEntity",
    "MalformedEvent",
    "OwnershipError",
    "UnknownEntity",
    "ValidationError",
    "VigieError",
    # identity
    "identity_key",
    "mentions_name",
    "utc_now",
    # logging
    "LogContext",
    "configure_logging",
    "get_logger",
    # result
    "Err",
    "Ok",
    "Result",
    "try_result",
    # settings
    "VigieSettings",
    "get_settings",
]
