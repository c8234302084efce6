"""
============================================================================
USERNAME WATCH BOT - STORAGE PACKAGE
============================================================================
In-memory state: the watch registry and the subscription store.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from storage.models import MonitorEntry, MonitorStatus, Subscription, WatchResult
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore

__all__ = [
    "MonitorEntry",
    "MonitorStatus",
    "Subscription",
    "WatchResult",
    "WatchRegistry",
    "SubscriptionStore",
]
