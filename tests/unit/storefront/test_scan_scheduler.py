import asyncio

import pytest

from app.core.enums import ScanState
from app.storefront.scheduler import SAFETY_SCAN_JOB_ID, ScanScheduler


class CountingScan:
    def __init__(self, delay=0.0, fail=False):
        self.calls = 0
        self.delay = delay
        self.fail = fail

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("scan exploded")


@pytest.mark.asyncio
async def test_burst_of_mutations_runs_one_scan():
    scan = CountingScan()
    scheduler = ScanScheduler(scan, debounce_delay=0.05, poll_interval=None)

    for _ in range(10):
        scheduler.notify_mutation()
    assert scheduler.has_pending_scan
    await asyncio.sleep(0.2)

    assert scan.calls == 1
    assert scheduler.scan_count == 1
    assert not scheduler.has_pending_scan
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_separate_bursts_run_separate_scans():
    scan = CountingScan()
    scheduler = ScanScheduler(scan, debounce_delay=0.02, poll_interval=None)

    scheduler.notify_mutation()
    await asyncio.sleep(0.1)
    scheduler.notify_mutation()
    await asyncio.sleep(0.1)

    assert scan.calls == 2
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_requests_during_scan_fold_into_one_follow_up():
    scan = CountingScan(delay=0.05)
    scheduler = ScanScheduler(scan, debounce_delay=0.01, poll_interval=None)

    first = asyncio.ensure_future(scheduler.run_scan())
    await asyncio.sleep(0.01)
    assert scheduler.state == ScanState.SCANNING

    await scheduler.run_scan()
    await scheduler.run_scan()
    await first

    assert scan.calls == 2
    assert scheduler.state == ScanState.IDLE


@pytest.mark.asyncio
async def test_failed_scan_returns_to_idle():
    scan = CountingScan(fail=True)
    scheduler = ScanScheduler(scan, poll_interval=None)

    await scheduler.run_scan()

    assert scan.calls == 1
    assert scheduler.state == ScanState.IDLE


@pytest.mark.asyncio
async def test_sync_scan_callable():
    calls = []
    scheduler = ScanScheduler(lambda: calls.append(1), poll_interval=None)

    await scheduler.run_scan()

    assert calls == [1]


@pytest.mark.asyncio
async def test_start_scans_and_registers_interval_job():
    scan = CountingScan()
    scheduler = ScanScheduler(scan, poll_interval=3.0)

    await scheduler.start()
    try:
        assert scan.calls == 1
        job = scheduler._scheduler.get_job(SAFETY_SCAN_JOB_ID)
        assert job is not None
        assert job.trigger.interval.total_seconds() == 3.0
    finally:
        await scheduler.shutdown()

    assert scheduler._scheduler is None


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_scan():
    scan = CountingScan()
    scheduler = ScanScheduler(scan, debounce_delay=0.05, poll_interval=None)

    scheduler.notify_mutation()
    await scheduler.shutdown()
    await asyncio.sleep(0.1)

    assert scan.calls == 0
