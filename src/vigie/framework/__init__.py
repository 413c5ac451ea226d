"""
Vigie framework: event bus, watchers, and alerts.
"""

from vigie.framework.alerts import Alert, AlertSeverity, AlertSink
from vigie.framework.bus import Dispatch, EventBus, WatcherFailure
from vigie.framework.watchers import BaseWatcher, MediaWatcher, PersonWatcher, Watcher

__all__ = [
    "Alert",
    "AlertSeverity",
    "AlertSink",
    "Dispatch",
    "EventBus",
    "WatcherFailure",
    "BaseWatcher",
    "MediaWatcher",
    "PersonWatcher",
    "Watcher",
]
