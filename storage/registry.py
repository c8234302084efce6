"""
============================================================================
USERNAME WATCH BOT - WATCH REGISTRY
============================================================================
In-memory mapping from username to the ordered list of monitor entries
that watch it.

Invariants
----------
• A (username, subscriber) pair appears at most once.
• A username whose entry list empties is removed from the mapping.
• A username is *locked* while any of its entries is CHECKING; the poll
  scheduler skips locked usernames.
• A subscriber holds at most ``max_per_subscriber`` entries overall.

All state is accessed only from the single asyncio event loop and no
method awaits, so every operation is atomic with respect to the command
handler and the poll sweep.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from storage.models import MonitorEntry, MonitorStatus, WatchResult
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("WatchRegistry")


class WatchRegistry:
    """
    Owner of every MonitorEntry.

    Parameters
    ----------
    max_per_subscriber : int
        Maximum number of concurrent watches for one subscriber.
    """

    def __init__(self, max_per_subscriber: int = 3):
        self.max_per_subscriber = max_per_subscriber
        self._watches: Dict[str, List[MonitorEntry]] = {}

    # ------------------------------------------------------------------
    # MUTATIONS
    # ------------------------------------------------------------------

    def add_watch(
        self,
        username: str,
        subscriber_id: int,
        now: Optional[datetime] = None,
    ) -> WatchResult:
        """
        Append a MONITORING entry for (username, subscriber_id).

        The duplicate check runs before the slot check; nothing is
        mutated unless the result is ADDED.
        """
        entries = self._watches.get(username, [])
        if any(entry.subscriber_id == subscriber_id for entry in entries):
            return WatchResult.ALREADY_WATCHING

        if self.slot_count(subscriber_id) >= self.max_per_subscriber:
            return WatchResult.SLOT_LIMIT_EXCEEDED

        now = now or TimeHelper.get_utc_now()
        entry = MonitorEntry(
            username=username,
            subscriber_id=subscriber_id,
            start_time=now,
            status=MonitorStatus.MONITORING,
            last_checked=None,
        )
        self._watches.setdefault(username, []).append(entry)

        logger.debug(
            f"Added watch '{username}' for subscriber {subscriber_id} "
            f"({len(self._watches[username])} watcher(s))"
        )
        return WatchResult.ADDED

    def remove_watch(self, username: str, subscriber_id: int) -> WatchResult:
        """Remove the entry for (username, subscriber_id) if present."""
        entries = self._watches.get(username)
        if not entries:
            return WatchResult.NOT_WATCHING

        remaining = [e for e in entries if e.subscriber_id != subscriber_id]
        if len(remaining) == len(entries):
            return WatchResult.NOT_WATCHING

        if remaining:
            self._watches[username] = remaining
        else:
            del self._watches[username]

        logger.debug(f"Removed watch '{username}' for subscriber {subscriber_id}")
        return WatchResult.REMOVED

    def remove_all(self, username: str) -> List[MonitorEntry]:
        """Drop every entry for *username* and return them."""
        removed = self._watches.pop(username, [])
        if removed:
            logger.debug(f"Removed all {len(removed)} watch(es) for '{username}'")
        return removed

    def mark_checking(self, username: str) -> None:
        """Lock *username* by flagging all its entries CHECKING."""
        for entry in self._watches.get(username, []):
            entry.status = MonitorStatus.CHECKING

    def mark_monitoring(self, username: str, now: Optional[datetime] = None) -> None:
        """Unlock *username* and record the check time on all its entries."""
        now = now or TimeHelper.get_utc_now()
        for entry in self._watches.get(username, []):
            entry.status = MonitorStatus.MONITORING
            entry.last_checked = now

    # ------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------

    def list_for(self, subscriber_id: int) -> List[Tuple[str, MonitorEntry]]:
        """All (username, entry) pairs belonging to *subscriber_id*."""
        return [
            (username, entry)
            for username, entries in self._watches.items()
            for entry in entries
            if entry.subscriber_id == subscriber_id
        ]

    def slot_count(self, subscriber_id: int) -> int:
        return sum(
            1
            for entries in self._watches.values()
            for entry in entries
            if entry.subscriber_id == subscriber_id
        )

    def is_locked(self, username: str) -> bool:
        return any(entry.is_checking for entry in self._watches.get(username, []))

    def entries(self, username: str) -> List[MonitorEntry]:
        """Snapshot of the entries for *username* (empty if unknown)."""
        return list(self._watches.get(username, []))

    def usernames(self) -> List[str]:
        """Snapshot of watched usernames in registry order."""
        return list(self._watches)

    def total_entries(self) -> int:
        return sum(len(entries) for entries in self._watches.values())

    def __contains__(self, username: object) -> bool:
        return username in self._watches

    def __len__(self) -> int:
        return len(self._watches)

    def __iter__(self) -> Iterator[str]:
        return iter(self.usernames())
