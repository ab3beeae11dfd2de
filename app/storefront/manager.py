"""
Per-page visibility manager.

Holds the hidden set for one page context and exposes the control surface used
by the API, the CLI and tests: refresh, add/remove/set/get hidden products.
"""

import logging
from typing import Iterable, List, Optional, Set

from app.storefront.acquisition import HiddenSetProvider
from app.storefront.config import DEFAULT_CONFIG, RestrictionConfig
from app.storefront.page import StorefrontPage
from app.storefront.restrictor import Restrictor
from app.storefront.scanner import DomScanner, ScanResult
from app.storefront.scheduler import ScanScheduler

logger = logging.getLogger(__name__)


class StorefrontVisibilityManager:

    def __init__(
        self,
        page: StorefrontPage,
        provider: Optional[HiddenSetProvider] = None,
        config: RestrictionConfig = DEFAULT_CONFIG,
        scanner: Optional[DomScanner] = None,
    ):
        self.page = page
        self.config = config
        self.provider = provider or HiddenSetProvider.default(config, base_url=page.url)
        self.scanner = scanner or DomScanner(Restrictor(config))
        self.scheduler: Optional[ScanScheduler] = None
        self._hidden: Set[str] = set()
        self._disconnect = None

    # --- hidden set ---

    async def acquire(self) -> Set[str]:
        """Replace the hidden set with a fresh merge of every source"""
        self._hidden = await self.provider.acquire(self.page.document)
        return set(self._hidden)

    def restrict_all(self, hidden_set: Iterable[str]) -> ScanResult:
        return self.scanner.scan(self.page.document, frozenset(hidden_set), url=self.page.url)

    # --- control surface ---

    def refresh(self) -> ScanResult:
        return self.restrict_all(self._hidden)

    def add_hidden_product(self, product_id: str) -> ScanResult:
        self._hidden.add(str(product_id))
        return self.refresh()

    def remove_hidden_product(self, product_id: str) -> ScanResult:
        self._hidden.discard(str(product_id))
        return self.refresh()

    def set_hidden_products(self, product_ids: Iterable[str]) -> ScanResult:
        self._hidden = {str(product_id) for product_id in product_ids}
        return self.refresh()

    def get_hidden_products(self) -> List[str]:
        return sorted(self._hidden)

    # --- lifecycle ---

    async def run_once(self) -> ScanResult:
        await self.acquire()
        return self.refresh()

    async def start(self):
        """Acquire, scan, then keep rescanning on mutations and on the interval"""
        await self.acquire()
        self.scheduler = ScanScheduler(
            self.refresh,
            debounce_delay=self.config.debounce_delay,
            poll_interval=self.config.poll_interval,
        )
        self._disconnect = self.page.observe(self.scheduler.notify_mutation)
        await self.scheduler.start()
        logger.info(f"Visibility manager started with {len(self._hidden)} hidden identifiers")

    async def stop(self):
        if self._disconnect is not None:
            self._disconnect()
            self._disconnect = None
        if self.scheduler is not None:
            await self.scheduler.shutdown()
