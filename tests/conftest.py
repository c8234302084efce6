"""
Shared fixtures: settings without a .env file, a controllable clock, a
fake aiogram bot that records sends, and a manual tick source for the
poll scheduler.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock

import pytest

from config.settings import Settings
from monitoring.notifier import Notifier
from monitoring.poller import PollScheduler
from monitoring.prober import Availability, ProbeResult
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore


ADMIN_ID = 1000
LOG_CHANNEL_ID = -100500
TOKEN = "123456:" + "A" * 35


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ManualTicker:
    """Job scheduler stand-in; tests fire registered jobs explicitly."""

    def __init__(self):
        self.jobs = {}

    def register_job(self, name, interval_seconds, coroutine_factory, enabled=True, run_immediately=False):
        self.jobs[name] = (interval_seconds, coroutine_factory)

    async def tick(self, name: str) -> None:
        await self.jobs[name][1]()


def sent_texts(bot: AsyncMock, chat_id: int) -> List[str]:
    """Every text the fake bot sent to *chat_id*, in order."""
    return [
        call.kwargs["text"]
        for call in bot.send_message.await_args_list
        if call.kwargs["chat_id"] == chat_id
    ]


def probe_result(username: str, availability: Availability, **kwargs) -> ProbeResult:
    return ProbeResult(username=username, availability=availability, **kwargs)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        BOT_TOKEN=TOKEN,
        ADMIN_ID=ADMIN_ID,
        ADMIN_LOG_CHANNEL_ID=LOG_CHANNEL_ID,
        POLL_INTERVAL=60,
        SWEEP_STARTUP_DELAY=3,
        CHECK_DELAY_MIN=10,
        CHECK_DELAY_MAX=30,
        RATE_LIMIT_COOLDOWN=600,
        MAX_WATCHES_PER_USER=3,
        LOG_TO_FILE=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry() -> WatchRegistry:
    return WatchRegistry(max_per_subscriber=3)


@pytest.fixture
def subscriptions() -> SubscriptionStore:
    return SubscriptionStore(admin_id=ADMIN_ID)


@pytest.fixture
def bot() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def notifier(bot) -> Notifier:
    return Notifier(bot=bot, admin_log_channel_id=LOG_CHANNEL_ID)


@pytest.fixture
def prober() -> AsyncMock:
    prober = AsyncMock()
    prober.check.side_effect = lambda username: probe_result(username, Availability.TAKEN)
    return prober


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def poller(registry, subscriptions, prober, notifier, settings, sleep, clock) -> PollScheduler:
    return PollScheduler(
        registry=registry,
        subscriptions=subscriptions,
        prober=prober,
        notifier=notifier,
        settings=settings,
        sleep=sleep,
        clock=clock,
        rng=random.Random(0),
    )


@pytest.fixture
def ticker(poller) -> ManualTicker:
    ticker = ManualTicker()
    poller.attach(ticker)
    return ticker
