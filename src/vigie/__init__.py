"""
Vigie - media ownership ledger and event watch.

Tracks who owns what share of which media outlet or organization, applies
ownership transfers atomically, and notifies watchers that raise alerts
about the persons and media they follow.
"""

__version__ = "0.1.0"

from vigie.core import *  # noqa
from vigie.domain import *  # noqa
from vigie.framework import *  # noqa
from vigie.runtime import Runtime  # noqa
