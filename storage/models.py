"""
============================================================================
USERNAME WATCH BOT - STATE MODELS
============================================================================
In-memory records for watches and subscriptions. Nothing here is
persisted; all state is lost on restart.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from utils.helpers import TimeHelper


# ============================================================================
# ENUMERATIONS
# ============================================================================

class MonitorStatus(str, enum.Enum):
    """Status of a single monitor entry"""
    MONITORING = "monitoring"
    CHECKING = "checking"


class WatchResult(str, enum.Enum):
    """Outcome of WatchRegistry.add_watch / remove_watch"""
    ADDED = "added"
    ALREADY_WATCHING = "already_watching"
    SLOT_LIMIT_EXCEEDED = "slot_limit_exceeded"
    REMOVED = "removed"
    NOT_WATCHING = "not_watching"


# ============================================================================
# MONITOR ENTRY
# ============================================================================

@dataclass
class MonitorEntry:
    """
    One subscriber's standing request to be told when *username*
    becomes available.
    """
    username: str
    subscriber_id: int
    start_time: datetime = field(default_factory=TimeHelper.get_utc_now)
    status: MonitorStatus = MonitorStatus.MONITORING
    last_checked: Optional[datetime] = None

    @property
    def is_checking(self) -> bool:
        return self.status == MonitorStatus.CHECKING

    def elapsed(self, now: Optional[datetime] = None) -> timedelta:
        """Time since the watch was started."""
        return (now or TimeHelper.get_utc_now()) - self.start_time


# ============================================================================
# SUBSCRIPTION
# ============================================================================

@dataclass
class Subscription:
    """Entitlement of a subscriber to use the bot until expiry_time."""
    subscriber_id: int
    expiry_time: datetime
    granted_by: int
    granted_at: datetime = field(default_factory=TimeHelper.get_utc_now)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Active while the expiry is strictly in the future."""
        return self.expiry_time > (now or TimeHelper.get_utc_now())
