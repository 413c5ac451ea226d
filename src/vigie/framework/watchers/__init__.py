"""
Watcher modules.

Watchers consume events from the :class:`~vigie.framework.bus.EventBus`
and raise alerts when a rule matches.
"""

from vigie.framework.watchers.base import BaseWatcher, Watcher, watched_entities
from vigie.framework.watchers.media import MediaWatcher
from vigie.framework.watchers.person import PersonWatcher

__all__ = [
    "Watcher",
    "BaseWatcher",
    "watched_entities",
    "MediaWatcher",
    "PersonWatcher",
]
