"""
============================================================================
USERNAME WATCH BOT - POLL SCHEDULER
============================================================================
The heart of the bot. On every tick of the job scheduler it sweeps the
watch registry, probes each username one after the other with a random
pause in between, and notifies subscribers when a username becomes
available.

Sweep
-----
1.  Empty registry or active rate-limit cool-down  → nothing to do
2.  Fixed startup delay
3.  For each username (registry order) that is not locked:
        random delay → mark CHECKING → probe
4.  AVAILABLE   → notify every watcher with an active subscription,
                  log one admin event per notified watcher, then drop
                  every entry for the username
5.  TAKEN/ERROR → revert to MONITORING, record last_checked
6.  Rate limit  → start the cool-down and abandon the rest of the sweep

Fencing
-------
Ticks may overlap when a sweep outlives the interval. A username whose
entries are CHECKING is skipped, which is the only protection against two
in-flight probes for the same username. It relies on the single-threaded
event loop: the check-and-set in ``check_username`` has no await between
the check and the set.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import random
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from config.constants import MessageTemplates
from config.settings import Settings
from monitoring.notifier import Notifier
from monitoring.prober import Availability, AvailabilityProber, ProbeResult
from monitoring.scheduler import JobScheduler
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore
from utils.helpers import TimeHelper
from utils.logger import get_logger, log_execution_time


logger = get_logger("PollScheduler")


SWEEP_JOB_NAME = "username_sweep"


class PollScheduler:
    """
    Periodic availability sweep over the watch registry.

    Parameters
    ----------
    registry : WatchRegistry
    subscriptions : SubscriptionStore
    prober : AvailabilityProber
    notifier : Notifier
    settings : Settings
        Interval, delays and cool-down.
    sleep : Callable
        Awaitable sleep, ``asyncio.sleep`` by default.
    clock : Callable
        Returns the current UTC datetime.
    rng : random.Random | None
        Source of the inter-check delays.
    """

    def __init__(
        self,
        registry: WatchRegistry,
        subscriptions: SubscriptionStore,
        prober: AvailabilityProber,
        notifier: Notifier,
        settings: Settings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = TimeHelper.get_utc_now,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry
        self.subscriptions = subscriptions
        self.prober = prober
        self.notifier = notifier

        self.interval = settings.POLL_INTERVAL
        self.startup_delay = settings.SWEEP_STARTUP_DELAY
        self.delay_min = settings.CHECK_DELAY_MIN
        self.delay_max = settings.CHECK_DELAY_MAX
        self.cooldown = timedelta(seconds=settings.RATE_LIMIT_COOLDOWN)

        self._sleep = sleep
        self._clock = clock
        self._rng = rng or random.Random()

        self._cooldown_until: Optional[datetime] = None

        # --- counters for the health endpoint ---
        self._sweeps = 0
        self._checks = 0
        self._available_found = 0
        self._errors = 0
        self._rate_limit_hits = 0
        self._last_sweep_at: Optional[datetime] = None

        logger.info(
            f"PollScheduler created — interval={self.interval}s, "
            f"delay={self.delay_min}-{self.delay_max}s, "
            f"cooldown={int(self.cooldown.total_seconds())}s"
        )

    # ------------------------------------------------------------------
    # WIRING
    # ------------------------------------------------------------------

    def attach(self, scheduler: JobScheduler) -> None:
        """Register the sweep on a fixed-cadence job scheduler."""
        scheduler.register_job(SWEEP_JOB_NAME, self.interval, self.sweep)

    # ------------------------------------------------------------------
    # COOL-DOWN
    # ------------------------------------------------------------------

    @property
    def in_cooldown(self) -> bool:
        if self._cooldown_until is None:
            return False
        if self._clock() >= self._cooldown_until:
            self._cooldown_until = None
            logger.info("Rate-limit cool-down is over, resuming checks")
            return False
        return True

    async def _start_cooldown(self) -> None:
        self._rate_limit_hits += 1
        self._cooldown_until = self._clock() + self.cooldown
        pause = TimeHelper.format_duration(self.cooldown)
        logger.warning(f"⚠️ Rate limit hit. Pausing checks for {pause}")
        await self.notifier.log_admin(MessageTemplates.LOG_RATE_LIMITED.format(cooldown=pause))

    # ------------------------------------------------------------------
    # SWEEP
    # ------------------------------------------------------------------

    @log_execution_time
    async def sweep(self) -> None:
        """One pass over every watched username."""
        if not len(self.registry):
            return

        if self.in_cooldown:
            logger.debug(
                f"Sweep skipped, cooling down until {self._cooldown_until.isoformat()}"
            )
            return

        await self._sleep(self.startup_delay)
        self._sweeps += 1
        logger.debug(f"Sweep #{self._sweeps} over {len(self.registry)} username(s)")

        for username in self.registry.usernames():
            if username not in self.registry:
                continue  # unwatched or found available meanwhile
            if self.registry.is_locked(username):
                logger.debug(f"Skipping '{username}', a check is already in flight")
                continue

            await self._sleep(self._rng.uniform(self.delay_min, self.delay_max))

            result = await self.check_username(username)
            if result is not None and result.rate_limited:
                logger.warning("Abandoning the rest of this sweep after a rate-limit response")
                break

        self._last_sweep_at = self._clock()

    # ------------------------------------------------------------------
    # SINGLE USERNAME
    # ------------------------------------------------------------------

    async def check_username(self, username: str) -> Optional[ProbeResult]:
        """
        Probe *username* once, under the CHECKING fence.

        Returns None without probing if the username is not watched, is
        locked by another in-flight check, or a cool-down is active.
        """
        if username not in self.registry or self.registry.is_locked(username):
            return None
        if self.in_cooldown:
            return None

        self.registry.mark_checking(username)
        self._checks += 1

        try:
            try:
                result = await self.prober.check(username)
            except Exception as e:
                logger.opt(exception=True).error(f"Prober raised for '{username}': {e}")
                result = ProbeResult(
                    username=username,
                    availability=Availability.ERROR,
                    error_message=str(e)[:200],
                    error_type=type(e).__name__,
                )

            if result.is_available:
                await self._handle_available(username)
            else:
                self.registry.mark_monitoring(username, self._clock())
                if result.is_error:
                    await self._handle_error(result)
                else:
                    logger.debug(f"'{username}' is still taken")

            return result

        finally:
            # Never leave a username fenced, even if notification blew up
            if self.registry.is_locked(username):
                self.registry.mark_monitoring(username, self._clock())

    async def _handle_error(self, result: ProbeResult) -> None:
        self._errors += 1
        logger.warning(
            f"Check failed for '{result.username}' "
            f"({result.error_type}): {result.error_message}"
        )
        await self.notifier.log_admin(
            MessageTemplates.LOG_CHECK_FAILED.format(
                username=result.username,
                error=result.error_message,
            )
        )
        if result.rate_limited:
            await self._start_cooldown()

    async def _handle_available(self, username: str) -> int:
        """
        Notify active watchers of *username*, then drop all its entries.

        Returns the number of notified subscribers.
        """
        now = self._clock()
        self._available_found += 1
        notified = 0

        for entry in self.registry.entries(username):
            if not self.subscriptions.is_active(entry.subscriber_id, now):
                logger.info(
                    f"Not notifying {entry.subscriber_id} about '{username}', "
                    f"subscription inactive"
                )
                continue

            elapsed = TimeHelper.format_duration(entry.elapsed(now))
            await self.notifier.send_direct(
                entry.subscriber_id,
                MessageTemplates.USERNAME_AVAILABLE.format(
                    username=username,
                    elapsed=elapsed,
                ),
            )
            await self.notifier.log_admin(
                MessageTemplates.LOG_USERNAME_AVAILABLE.format(
                    username=username,
                    user_id=entry.subscriber_id,
                    elapsed=elapsed,
                )
            )
            notified += 1

        self.registry.remove_all(username)
        logger.info(f"'{username}' is available — notified {notified} subscriber(s)")
        return notified

    # ------------------------------------------------------------------
    # DIAGNOSTIC
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "sweeps": self._sweeps,
            "checks_performed": self._checks,
            "available_found": self._available_found,
            "errors": self._errors,
            "rate_limit_hits": self._rate_limit_hits,
            "in_cooldown": self._cooldown_until is not None,
            "last_sweep_at": (
                self._last_sweep_at.isoformat() if self._last_sweep_at else None
            ),
        }
