"""
Re-evaluation scheduling for storefront scans.

Two event sources feed one scan task: mutation notifications, debounced so a
burst collapses into a single scan after a quiet window, and a fixed-interval
APScheduler job that catches whatever the notifications missed.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.enums import ScanState

logger = logging.getLogger(__name__)

ScanCallable = Callable[[], Union[Any, Awaitable[Any]]]

SAFETY_SCAN_JOB_ID = "storefront-safety-scan"


class ScanScheduler:
    """
    idle -> scanning -> idle on a single event loop.

    A newer mutation supersedes a pending debounced scan. A scan requested while
    one is running is folded into one follow-up scan.
    """

    def __init__(self, scan: ScanCallable, debounce_delay: float = 0.2, poll_interval: Optional[float] = 3.0):
        self._scan = scan
        self.debounce_delay = debounce_delay
        self.poll_interval = poll_interval
        self.state = ScanState.IDLE
        self.scan_count = 0

        self._pending: Optional[asyncio.TimerHandle] = None
        self._rescan_requested = False
        self._tasks = set()
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def has_pending_scan(self) -> bool:
        return self._pending is not None

    async def start(self):
        """Initial (page-ready) scan, then the safety-net interval"""
        await self.run_scan()
        if self.poll_interval:
            self._scheduler = AsyncIOScheduler()
            self._scheduler.add_job(
                self.run_scan,
                IntervalTrigger(seconds=self.poll_interval),
                id=SAFETY_SCAN_JOB_ID,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            self._scheduler.start()
            logger.info(f"Safety-net scan every {self.poll_interval}s")

    def notify_mutation(self, kind: str = "childList"):
        """Mutation observer callback; (re)starts the debounce window"""
        loop = asyncio.get_running_loop()
        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(self.debounce_delay, self._fire)

    def _fire(self):
        self._pending = None
        task = asyncio.ensure_future(self.run_scan())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def run_scan(self):
        if self.state == ScanState.SCANNING:
            self._rescan_requested = True
            return

        self.state = ScanState.SCANNING
        try:
            while True:
                self._rescan_requested = False
                self.scan_count += 1
                try:
                    result = self._scan()
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("Storefront scan failed")
                if not self._rescan_requested:
                    break
        finally:
            self.state = ScanState.IDLE

    async def shutdown(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
