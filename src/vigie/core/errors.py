"""
Structured error types for Vigie.

Every failure the ownership ledger, the entity store, or the event bus can
report is a typed ``VigieError`` carrying a category and structured
context. None of them is fatal: each is raised (or returned inside an
``Err``) before any state has been mutated, so callers may log and move on.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure the caller may act on
    - **Rich Context:** Errors carry owner/target/event metadata for logging
    - **Error Chaining:** Watcher exceptions are preserved as ``cause``
    - **Recoverable by Construction:** No error leaves a partial mutation

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        VigieError                             │
        │               (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  OwnershipError       LookupFailure       ValidationError     │
        │  (OWNERSHIP)          (LOOKUP)            (VALIDATION)        │
        │       │                    │                    │              │
        │  InvariantViolation   UnknownEntity       MalformedEvent      │
        │  InsufficientShare    DuplicateEntity     MalformedEntity     │
        │                                           InvalidOperation    │
        │                                                               │
        │  DispatchError                                                │
        │  (DISPATCH)                                                   │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> err = InvariantViolation("total would exceed 100%")
    >>> err.with_context(target="le monde").to_dict()["context"]
    {'target': 'le monde'}
    >>> err.category
    <ErrorCategory.OWNERSHIP: 'OWNERSHIP'>

Tags:
    error-handling, exception-hierarchy, error-context, vigie, ownership

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        OWNERSHIP: Ledger invariant or share violations
        LOOKUP: Entity resolution failures
        VALIDATION: Malformed events, records, or operation arguments
        DISPATCH: Failures raised by watchers during dispatch
        INTERNAL: Bugs, unexpected state
    """

    OWNERSHIP = "OWNERSHIP"
    LOOKUP = "LOOKUP"
    VALIDATION = "VALIDATION"
    DISPATCH = "DISPATCH"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in :meth:`to_dict`, so log lines stay
    short. Anything without a dedicated field goes into ``metadata``.

    Attributes:
        owner: Identity key of the owning entity
        target: Identity key of the owned entity
        seller: Identity key of the seller in a transfer
        buyer: Identity key of the buyer in a transfer
        event_type: Event type being dispatched
        event_id: Identifier of the event being dispatched
        metadata: Additional key-value pairs
    """

    owner: str | None = None
    target: str | None = None
    seller: str | None = None
    buyer: str | None = None
    event_type: str | None = None
    event_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["owner", "target", "seller", "buyer", "event_type", "event_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class VigieError(Exception):
    """
    Base exception for all Vigie errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` chains the underlying exception both as an
    attribute and as ``__cause__``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> VigieError:
        """
        Add context to this error (fluent API).

        Usage:
            raise UnknownEntity("No such entity").with_context(
                target="le monde",
                lookup="publication source",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# OWNERSHIP ERRORS
# =============================================================================


class OwnershipError(VigieError):
    """A ledger operation was refused; the ledger is unchanged."""

    default_category = ErrorCategory.OWNERSHIP


class InvariantViolation(OwnershipError):
    """A grant would push a target's total ownership above 100%."""

    def __init__(
        self,
        message: str,
        *,
        current_total: float | None = None,
        requested: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.current_total = current_total
        self.requested = requested

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.current_total is not None:
            result["current_total"] = self.current_total
        if self.requested is not None:
            result["requested"] = self.requested
        return result


class InsufficientShare(OwnershipError):
    """A transfer asks for more than the seller currently holds."""

    def __init__(
        self,
        message: str,
        *,
        held: float | None = None,
        requested: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.held = held
        self.requested = requested

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.held is not None:
            result["held"] = self.held
        if self.requested is not None:
            result["requested"] = self.requested
        return result


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class LookupFailure(VigieError):
    """Entity resolution failed."""

    default_category = ErrorCategory.LOOKUP


class UnknownEntity(LookupFailure):
    """A reference resolves to no registered entity."""

    def __init__(self, name: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Unknown entity: {name!r}", **kwargs)
        self.name = name


class DuplicateEntity(LookupFailure):
    """A different entity is already registered under the same identity key."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Identity key already registered: {key!r}", **kwargs)
        self.key = key


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(VigieError):
    """
    Input validation error.

    Records which field failed, the offending value, and the constraint
    that was not met.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


class MalformedEvent(ValidationError):
    """A Transfer or Publication payload is missing or has an invalid field."""

    pass


class MalformedEntity(ValidationError):
    """An entity record cannot be built (blank name, wrong kind, ...)."""

    pass


class InvalidOperation(ValidationError):
    """Operation arguments break a precondition (range, self-ownership, ...)."""

    pass


# =============================================================================
# DISPATCH ERRORS
# =============================================================================


class DispatchError(VigieError):
    """A watcher raised while handling an event."""

    default_category = ErrorCategory.DISPATCH


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "VigieError",
    # Ownership
    "OwnershipError",
    "InvariantViolation",
    "InsufficientShare",
    # Lookup
    "LookupFailure",
    "UnknownEntity",
    "DuplicateEntity",
    # Validation
    "ValidationError",
    "MalformedEvent",
    "MalformedEntity",
    "InvalidOperation",
    # Dispatch
    "DispatchError",
]
