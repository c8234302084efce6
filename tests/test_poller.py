import asyncio
from datetime import timedelta

import pytest

from monitoring.poller import SWEEP_JOB_NAME
from monitoring.prober import Availability
from storage.models import MonitorStatus
from tests.conftest import ADMIN_ID, LOG_CHANNEL_ID, probe_result, sent_texts


def answers(mapping, default=Availability.TAKEN):
    """Prober side effect returning a fixed availability per username."""
    def check(username):
        value = mapping.get(username, default)
        if isinstance(value, Availability):
            return probe_result(username, value)
        return value
    return check


@pytest.mark.asyncio
async def test_empty_registry_does_nothing(poller, prober, sleep):
    await poller.sweep()
    prober.check.assert_not_awaited()
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_sweep_waits_before_each_check(poller, registry, subscriptions, sleep, clock):
    subscriptions.grant(2, "1week", ADMIN_ID, now=clock())
    registry.add_watch("alice", 2, clock())
    registry.add_watch("bob", 2, clock())

    await poller.sweep()

    delays = [call.args[0] for call in sleep.await_args_list]
    assert delays[0] == 3
    assert len(delays) == 3
    assert all(10 <= d <= 30 for d in delays[1:])


@pytest.mark.asyncio
async def test_taken_reverts_to_monitoring(poller, registry, prober, clock, bot):
    registry.add_watch("alice", 2, clock())
    clock.advance(minutes=1)

    await poller.sweep()

    prober.check.assert_awaited_once_with("alice")
    [entry] = registry.entries("alice")
    assert entry.status == MonitorStatus.MONITORING
    assert entry.last_checked == clock()
    bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_available_notifies_active_subscribers_only(
    poller, registry, subscriptions, prober, clock, bot
):
    subscriptions.grant(2, "1week", ADMIN_ID, now=clock())
    subscriptions.grant(3, "1week", ADMIN_ID, now=clock() - timedelta(days=8))
    registry.add_watch("alice", 2, clock())
    registry.add_watch("alice", 3, clock())
    registry.add_watch("alice", ADMIN_ID, clock())
    registry.add_watch("alice", 4, clock())  # never subscribed
    prober.check.side_effect = answers({"alice": Availability.AVAILABLE})

    clock.advance(minutes=5, seconds=2)
    await poller.sweep()

    assert sent_texts(bot, 2) == ['✅ The username "alice" is now available! It took 5m 2s.']
    assert len(sent_texts(bot, ADMIN_ID)) == 1
    assert sent_texts(bot, 3) == []
    assert sent_texts(bot, 4) == []
    assert len(sent_texts(bot, LOG_CHANNEL_ID)) == 2
    assert "alice" not in registry
    assert poller.get_stats()["available_found"] == 1


@pytest.mark.asyncio
async def test_failed_notification_still_removes_username(poller, registry, prober, clock, bot):
    registry.add_watch("alice", ADMIN_ID, clock())
    prober.check.side_effect = answers({"alice": Availability.AVAILABLE})
    bot.send_message.side_effect = ConnectionError("down")

    await poller.sweep()

    assert "alice" not in registry


@pytest.mark.asyncio
async def test_locked_username_is_skipped(poller, registry, prober, clock):
    registry.add_watch("alice", 2, clock())
    registry.add_watch("bob", 2, clock())
    registry.mark_checking("alice")

    await poller.sweep()

    prober.check.assert_awaited_once_with("bob")
    assert registry.is_locked("alice")


@pytest.mark.asyncio
async def test_overlapping_sweeps_never_probe_the_same_username_twice(
    poller, registry, prober, clock
):
    registry.add_watch("alice", 2, clock())
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_check(username):
        started.set()
        await release.wait()
        return probe_result(username, Availability.TAKEN)

    prober.check.side_effect = slow_check

    first = asyncio.create_task(poller.sweep())
    await started.wait()
    await poller.sweep()
    release.set()
    await first

    assert prober.check.await_count == 1
    assert not registry.is_locked("alice")


@pytest.mark.asyncio
async def test_username_removed_during_sweep_is_skipped(poller, registry, prober, sleep, clock):
    registry.add_watch("alice", 2, clock())
    registry.add_watch("bob", 3, clock())

    async def unwatch_bob(username):
        registry.remove_watch("bob", 3)
        return probe_result(username, Availability.TAKEN)

    prober.check.side_effect = unwatch_bob
    await poller.sweep()

    prober.check.assert_awaited_once_with("alice")


@pytest.mark.asyncio
async def test_error_is_treated_as_taken(poller, registry, prober, clock, bot):
    registry.add_watch("alice", 2, clock())
    prober.check.side_effect = answers({
        "alice": probe_result("alice", Availability.ERROR, error_message="Unexpected status 500"),
    })

    await poller.sweep()

    assert "alice" in registry
    assert not registry.is_locked("alice")
    [log] = sent_texts(bot, LOG_CHANNEL_ID)
    assert "alice" in log and "500" in log
    assert poller.get_stats()["errors"] == 1


@pytest.mark.asyncio
async def test_prober_exception_never_leaves_a_lock(poller, registry, prober, clock):
    registry.add_watch("alice", 2, clock())
    prober.check.side_effect = RuntimeError("boom")

    result = await poller.check_username("alice")

    assert result.is_error
    assert result.error_type == "RuntimeError"
    assert not registry.is_locked("alice")


@pytest.mark.asyncio
async def test_rate_limit_pauses_sweeps(poller, registry, prober, clock, bot):
    registry.add_watch("alice", 2, clock())
    registry.add_watch("bob", 2, clock())
    prober.check.side_effect = answers({
        "alice": probe_result("alice", Availability.ERROR, status_code=429, rate_limited=True),
    })

    await poller.sweep()

    prober.check.assert_awaited_once_with("alice")
    assert poller.in_cooldown
    assert any("Rate limit" in text for text in sent_texts(bot, LOG_CHANNEL_ID))

    clock.advance(minutes=5)
    await poller.sweep()
    assert prober.check.await_count == 1
    assert await poller.check_username("bob") is None

    prober.check.side_effect = answers({})
    clock.advance(minutes=5)
    await poller.sweep()
    assert not poller.in_cooldown
    assert prober.check.await_count == 3
    assert poller.get_stats()["rate_limit_hits"] == 1


@pytest.mark.asyncio
async def test_check_username_ignores_unknown(poller, prober):
    assert await poller.check_username("ghost") is None
    prober.check.assert_not_awaited()


@pytest.mark.asyncio
async def test_end_to_end_through_ticks(poller, ticker, registry, subscriptions, prober, clock, bot):
    assert ticker.jobs[SWEEP_JOB_NAME][0] == 60

    subscriptions.grant(2, "1month", ADMIN_ID, now=clock())
    registry.add_watch("alice", 2, clock())

    clock.advance(minutes=1)
    await ticker.tick(SWEEP_JOB_NAME)
    assert "alice" in registry

    prober.check.side_effect = answers({"alice": Availability.AVAILABLE})
    clock.advance(hours=2, minutes=1)
    await ticker.tick(SWEEP_JOB_NAME)

    assert sent_texts(bot, 2) == ['✅ The username "alice" is now available! It took 2h 2m 0s.']
    assert "alice" not in registry

    await ticker.tick(SWEEP_JOB_NAME)
    assert prober.check.await_count == 2
