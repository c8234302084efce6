import asyncio

import pytest

from monitoring.scheduler import Scheduler


@pytest.mark.asyncio
async def test_job_runs_periodically():
    calls = []

    async def job():
        calls.append(1)

    scheduler = Scheduler(tick_interval=0.01)
    scheduler.register_job("job", 0.05, job, run_immediately=True)
    await scheduler.start()
    await asyncio.sleep(0.2)
    await scheduler.stop()

    assert len(calls) >= 2
    [stats] = scheduler.get_job_stats()
    assert stats["run_count"] == len(calls)
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_first_run_waits_one_interval():
    calls = []

    async def job():
        calls.append(1)

    scheduler = Scheduler(tick_interval=0.01)
    scheduler.register_job("job", 60, job)
    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert calls == []


@pytest.mark.asyncio
async def test_failing_job_keeps_running():
    async def job():
        raise RuntimeError("boom")

    scheduler = Scheduler(tick_interval=0.01)
    scheduler.register_job("job", 0.02, job, run_immediately=True)
    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    [stats] = scheduler.get_job_stats()
    assert stats["error_count"] >= 2
    assert stats["run_count"] == 0


@pytest.mark.asyncio
async def test_disabled_job_does_not_run():
    calls = []

    async def job():
        calls.append(1)

    scheduler = Scheduler(tick_interval=0.01)
    scheduler.register_job("job", 0.01, job, run_immediately=True)
    assert scheduler.disable_job("job")
    assert not scheduler.enable_job("missing")
    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert calls == []


@pytest.mark.asyncio
async def test_slow_runs_overlap_and_stop_cancels_them():
    running = []

    async def job():
        running.append(1)
        await asyncio.sleep(10)

    scheduler = Scheduler(tick_interval=0.01)
    scheduler.register_job("job", 0.02, job, run_immediately=True)
    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(running) >= 2
