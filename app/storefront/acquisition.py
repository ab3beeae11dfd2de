"""
Hidden-set acquisition.

Several independent sources each contribute identifiers; the provider merges
all of them. A source that fails contributes nothing and the others still run.
"""

import asyncio
import json
import logging
from typing import Any, Iterable, List, Optional, Set
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from app.core.exceptions import HiddenSetSourceError
from app.storefront.config import INLINE_DATA_SCRIPT_ID, RestrictionConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def _is_true(value: Any) -> bool:
    return value is True or value == "true"


def identifiers_from_payload(payload: Any) -> Set[str]:
    """Identifiers from a hidden-products response body."""
    if not isinstance(payload, dict):
        raise HiddenSetSourceError("Hidden products payload is not an object")
    entries = payload.get("hiddenProducts")
    if not isinstance(entries, list):
        raise HiddenSetSourceError("Hidden products payload has no hiddenProducts list")

    identifiers: Set[str] = set()
    for entry in entries:
        if isinstance(entry, dict):
            for field in ("id", "handle"):
                if entry.get(field):
                    identifiers.add(str(entry[field]))
        elif entry:
            identifiers.add(str(entry))
    return identifiers


class HiddenSetSource:
    """Base class for one source of hidden identifiers."""

    name = "source"

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        raise NotImplementedError


class StaticHiddenSetSource(HiddenSetSource):
    """Identifiers already known to the caller"""

    name = "static"

    def __init__(self, identifiers: Iterable[str]):
        self.identifiers = {str(identifier) for identifier in identifiers if identifier}

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        return set(self.identifiers)


class ApiHiddenSetSource(HiddenSetSource):
    """GET the hidden-products endpoint and read `{hiddenProducts: [{id, handle}]}`"""

    name = "api"

    def __init__(self, endpoint: Optional[str], base_url: Optional[str] = None, timeout: float = 10.0):
        self.endpoint = endpoint
        self.base_url = base_url
        self.timeout = timeout

    @property
    def url(self) -> Optional[str]:
        if not self.endpoint:
            return None
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        if not self.base_url:
            return None
        return urljoin(self.base_url, self.endpoint)

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        url = self.url
        if not url:
            logger.debug("No hidden products endpoint configured for this page")
            return set()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, headers={"Content-Type": "application/json"})
            response.raise_for_status()
            payload = response.json()

        identifiers = identifiers_from_payload(payload)
        logger.info(f"Loaded {len(payload['hiddenProducts'])} hidden products from API")
        return identifiers


class InlineJsonSource(HiddenSetSource):
    """`<script id="product-visibility-data">` holding a flat identifier -> bool map"""

    name = "inline-json"

    def __init__(self, script_id: str = INLINE_DATA_SCRIPT_ID):
        self.script_id = script_id

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        script = document.find("script", id=self.script_id)
        if script is None:
            return set()
        data = json.loads(script.get_text() or "{}")
        if not isinstance(data, dict):
            raise HiddenSetSourceError(f"#{self.script_id} does not hold an object")
        return {key for key, value in data.items() if key != "initialized" and value is True}


class DataAttributeSource(HiddenSetSource):
    """Product elements carrying their metafields in `data-product-metafields`"""

    name = "data-attributes"

    def __init__(self, namespace: str = "visibility_manager", key: str = "hidden"):
        self.namespace = namespace
        self.key = key

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        identifiers: Set[str] = set()
        for element in document.select("[data-product-id], [data-product-handle]"):
            raw = element.get("data-product-metafields")
            if not raw:
                continue
            try:
                metafields = json.loads(raw)
            except ValueError:
                logger.debug(f"Skipping unparsable data-product-metafields: {raw[:80]}")
                continue
            if not isinstance(metafields, dict):
                continue
            if _is_true((metafields.get(self.namespace) or {}).get(self.key)):
                identifier = element.get("data-product-id") or element.get("data-product-handle")
                if identifier:
                    identifiers.add(identifier)
        return identifiers


class ProductPageJsonSource(HiddenSetSource):
    """`script[type=application/json]` blocks whose product metafield is set"""

    name = "product-json"

    def __init__(self, namespace: str = "visibility_manager", key: str = "hidden"):
        self.namespace = namespace
        self.key = key

    async def fetch(self, document: BeautifulSoup) -> Set[str]:
        identifiers: Set[str] = set()
        for script in document.select('script[type="application/json"]'):
            try:
                data = json.loads(script.get_text() or "null")
            except ValueError:
                continue
            product = data.get("product") if isinstance(data, dict) else None
            if not isinstance(product, dict):
                continue
            metafields = product.get("metafields") or {}
            if not isinstance(metafields, dict):
                continue
            if _is_true((metafields.get(self.namespace) or {}).get(self.key)):
                for field in ("id", "handle"):
                    if product.get(field):
                        identifiers.add(str(product[field]))
        return identifiers


class HiddenSetProvider:
    """Merges every source into one hidden set. `acquire` never raises."""

    def __init__(self, sources: Iterable[HiddenSetSource], timeout: Optional[float] = 10.0):
        self.sources: List[HiddenSetSource] = list(sources)
        self.timeout = timeout

    @classmethod
    def default(cls, config: RestrictionConfig = DEFAULT_CONFIG, base_url: Optional[str] = None, timeout: float = 10.0) -> "HiddenSetProvider":
        return cls(
            [
                ApiHiddenSetSource(config.api_endpoint, base_url=base_url, timeout=timeout),
                InlineJsonSource(),
                DataAttributeSource(config.namespace, config.metafield_key),
                ProductPageJsonSource(config.namespace, config.metafield_key),
            ],
            timeout=timeout,
        )

    async def _fetch_one(self, source: HiddenSetSource, document: BeautifulSoup) -> Set[str]:
        try:
            if self.timeout:
                return await asyncio.wait_for(source.fetch(document), timeout=self.timeout)
            return await source.fetch(document)
        except Exception as e:
            logger.warning(f"Hidden set source '{source.name}' failed, ignoring it: {str(e)}")
            return set()

    async def acquire(self, document: BeautifulSoup) -> Set[str]:
        hidden: Set[str] = set()
        for source in self.sources:
            hidden.update(await self._fetch_one(source, document))
        logger.debug(f"Acquired {len(hidden)} hidden identifiers from {len(self.sources)} sources")
        return hidden
