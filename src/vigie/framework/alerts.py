"""
Alerts and the sink that collects them.

Watchers raise ``Alert`` objects; an ``AlertSink`` keeps every alert of the
run in arrival order for later inspection. There is no deduplication and
no capacity bound.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from vigie.core.identity import utc_now
from vigie.core.logging import get_logger

if TYPE_CHECKING:
    from vigie.domain.events import Event

logger = get_logger(__name__)


class AlertSeverity(str, Enum):
    """Alert severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def _order(self) -> list[AlertSeverity]:
        return [
            AlertSeverity.INFO,
            AlertSeverity.WARNING,
            AlertSeverity.ERROR,
            AlertSeverity.CRITICAL,
        ]

    def __lt__(self, other: AlertSeverity) -> bool:
        return self._order().index(self) < self._order().index(other)

    def __le__(self, other: AlertSeverity) -> bool:
        return self._order().index(self) <= self._order().index(other)

    def __ge__(self, other: AlertSeverity) -> bool:
        return self._order().index(self) >= self._order().index(other)

    def __gt__(self, other: AlertSeverity) -> bool:
        return self._order().index(self) > self._order().index(other)


@dataclass(frozen=True)
class Alert:
    """
    A human-readable notice raised by a watcher about one event.

    ``subject`` names the watched entity the alert concerns; ``source``
    names the watcher that raised it.
    """

    message: str
    event: Event
    source: str
    subject: str | None = None
    severity: AlertSeverity = AlertSeverity.INFO
    created_at: datetime = field(default_factory=utc_now)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "message": self.message,
            "severity": self.severity.value,
            "source": self.source,
            "event_id": self.event.event_id,
            "event_type": self.event.event_type.value,
            "created_at": self.created_at.isoformat(),
        }
        if self.subject:
            result["subject"] = self.subject
        if self.metadata:
            result["metadata"] = self.metadata
        return result

    def __str__(self) -> str:
        return f"[{self.created_at:%Y-%m-%d %H:%M:%S}] {self.message}"


class AlertSink:
    """Ordered, append-only log of every alert raised during a run."""

    def __init__(self) -> None:
        self._alerts: list[Alert] = []

    def record(self, alert: Alert) -> None:
        self._alerts.append(alert)
        logger.info(
            "alert_recorded",
            source=alert.source,
            subject=alert.subject,
            severity=alert.severity.value,
            event_id=alert.event.event_id,
        )

    def all(self) -> list[Alert]:
        """All alerts, oldest first."""
        return list(self._alerts)

    def by_source(self, source: str) -> list[Alert]:
        return [a for a in self._alerts if a.source == source]

    def by_severity(self, min_severity: AlertSeverity) -> list[Alert]:
        return [a for a in self._alerts if a.severity >= min_severity]

    def __len__(self) -> int:
        return len(self._alerts)

    def __iter__(self) -> Iterator[Alert]:
        return iter(self.all())


__all__ = ["AlertSeverity", "Alert", "AlertSink"]
