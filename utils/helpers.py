"""
============================================================================
USERNAME WATCH BOT - HELPER UTILITIES
============================================================================
Time formatting and the bounded recent-message cache.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Hashable, Union


# ============================================================================
# TIME HELPERS
# ============================================================================

class TimeHelper:
    """
    Time and date manipulation utilities.
    """

    @staticmethod
    def get_utc_now() -> datetime:
        """Get current timezone-aware UTC datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def format_date(dt: datetime, fmt: str = "%Y-%m-%d") -> str:
        """
        Format datetime to string.

        Args:
            dt: Datetime to format
            fmt: Format string

        Returns:
            Formatted string
        """
        return dt.strftime(fmt)

    @staticmethod
    def format_duration(value: Union[timedelta, float, int]) -> str:
        """
        Convert an elapsed time to a short human-readable string.

        The two most significant units are kept, plus seconds below a day:
        ``"45s"``, ``"3m 5s"``, ``"2h 3m 5s"``, ``"4d 2h 3m"``.
        Negative values are clamped to ``"0s"``.

        Args:
            value: A timedelta or a number of seconds

        Returns:
            Human-readable string
        """
        if isinstance(value, timedelta):
            value = value.total_seconds()

        total = max(0, int(value))
        days, remainder = divmod(total, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes, seconds = divmod(remainder, 60)

        if days > 0:
            return f"{days}d {hours}h {minutes}m"
        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"


# ============================================================================
# RECENT MESSAGE CACHE
# ============================================================================

class RecentIdCache:
    """
    Insertion-ordered set of recently seen identifiers.

    Once the cache holds more than ``max_size`` ids, the ``prune_count``
    oldest ones are dropped.
    """

    def __init__(self, max_size: int = 1000, prune_count: int = 100):
        if prune_count < 1:
            raise ValueError("prune_count must be at least 1")

        self.max_size = max_size
        self.prune_count = prune_count
        self._ids: "OrderedDict[Hashable, None]" = OrderedDict()

    def seen(self, identifier: Hashable) -> bool:
        """
        Record *identifier* and report whether it was already present.

        Returns:
            True for a duplicate, False the first time an id is seen
        """
        if identifier in self._ids:
            return True

        self._ids[identifier] = None

        if len(self._ids) > self.max_size:
            for _ in range(min(self.prune_count, len(self._ids))):
                self._ids.popitem(last=False)

        return False

    def __contains__(self, identifier: Hashable) -> bool:
        return identifier in self._ids

    def __len__(self) -> int:
        return len(self._ids)


# ============================================================================
# END OF HELPERS MODULE
# ============================================================================
