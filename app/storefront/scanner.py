"""
Single scan pass over a storefront document.

A pass first releases elements whose product left the hidden set, then
restricts every product card and product reference that matches it, and
finally handles the product page itself.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Optional, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from app.storefront.config import (
    CONTAINER_SELECTORS,
    INLINE_TAGS,
    PRODUCT_CARD_SELECTORS,
    PRODUCT_REFERENCE_SELECTORS,
    RESTRICTED_CLASS,
)
from app.storefront.identifiers import handle_from_href
from app.storefront.matching import is_hidden
from app.storefront.restrictor import Restrictor, is_overlay_part, is_restricted
from app.storefront.strategies import DEFAULT_STRATEGIES, IdentificationStrategy, candidate_identifiers

logger = logging.getLogger(__name__)

MATCHED_ATTR = "data-pvm-product"


@dataclass
class ScanResult:
    restricted: int = 0
    released: int = 0
    page_restricted: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.restricted or self.released or self.page_restricted)


def find_product_container(element: Tag, selectors: Sequence[str] = CONTAINER_SELECTORS) -> Tag:
    """
    Closest ancestor (or self) matching the first container selector that matches.

    Without one, the nearest non-inline ancestor, so an overlay is never nested
    inside a link or a paragraph.
    """
    for selector in selectors:
        container = element.css.closest(selector)
        if container is not None:
            return container

    container = element
    while container.name in INLINE_TAGS and isinstance(container.parent, Tag) and not isinstance(container.parent, BeautifulSoup):
        container = container.parent
    return container


def current_product_handle(document: BeautifulSoup, url: Optional[str] = None) -> Optional[str]:
    """Handle of the product a product page renders, or None on other pages"""
    if url and "/products/" in urlparse(url).path:
        return handle_from_href(urlparse(url).path)

    if document.select_one('meta[property="og:product"], meta[property="og:type"][content="product"]') is None:
        return None
    canonical = document.select_one('link[rel="canonical"]')
    if canonical is not None and handle_from_href(canonical.get("href")):
        return handle_from_href(canonical.get("href"))
    og_url = document.select_one('meta[property="og:url"]')
    if og_url is not None:
        return handle_from_href(og_url.get("content"))
    return None


class DomScanner:
    """Matches product elements against a hidden set and (un)restricts them."""

    def __init__(
        self,
        restrictor: Restrictor,
        strategies: Sequence[IdentificationStrategy] = DEFAULT_STRATEGIES,
        card_selectors: Sequence[str] = PRODUCT_CARD_SELECTORS,
        reference_selectors: Sequence[str] = PRODUCT_REFERENCE_SELECTORS,
    ):
        self.restrictor = restrictor
        self.strategies = strategies
        self.card_selectors = card_selectors
        self.reference_selectors = reference_selectors

    def _blocked(self, element: Tag) -> bool:
        """Inside or around an element that already carries a restriction"""
        if is_overlay_part(element) or is_restricted(element):
            return True
        if any(isinstance(parent, Tag) and is_restricted(parent) for parent in element.parents):
            return True
        return element.select_one(f".{RESTRICTED_CLASS}") is not None

    def _matching_identifier(self, element: Tag, hidden_set: AbstractSet[str]) -> Optional[str]:
        for candidate in candidate_identifiers(element, self.strategies):
            if is_hidden(candidate, hidden_set):
                return candidate
        return None

    def _restrict(self, container: Tag, identifier: str) -> bool:
        if not self.restrictor.restrict(container):
            return False
        container[MATCHED_ATTR] = identifier
        logger.debug(f"Restricted product element for '{identifier}'")
        return True

    def release_stale(self, document: BeautifulSoup, hidden_set: AbstractSet[str]) -> int:
        released = 0
        for element in document.select(f".{RESTRICTED_CLASS}"):
            if is_hidden(element.get(MATCHED_ATTR, ""), hidden_set):
                continue
            self.restrictor.unrestrict(element)
            element.attrs.pop(MATCHED_ATTR, None)
            released += 1
        return released

    def scan(self, document: BeautifulSoup, hidden_set: AbstractSet[str], url: Optional[str] = None) -> ScanResult:
        result = ScanResult()
        result.released = self.release_stale(document, hidden_set)

        if not hidden_set or not self.restrictor.config.enabled:
            return result

        for selector in self.card_selectors:
            for element in document.select(selector):
                if self._blocked(element):
                    continue
                identifier = self._matching_identifier(element, hidden_set)
                if identifier and self._restrict(element, identifier):
                    result.restricted += 1

        for selector in self.reference_selectors:
            for element in document.select(selector):
                if self._blocked(element):
                    continue
                identifier = self._matching_identifier(element, hidden_set)
                if not identifier:
                    continue
                container = find_product_container(element)
                if self._blocked(container):
                    continue
                if self._restrict(container, identifier):
                    result.restricted += 1

        handle = current_product_handle(document, url)
        if handle and is_hidden(handle, hidden_set):
            section = self.restrictor.restrict_product_page(document)
            if section is not None:
                section[MATCHED_ATTR] = handle
                result.page_restricted = True

        if result.changed:
            logger.info(
                f"Scan restricted {result.restricted} products, released {result.released}"
                f"{', product page hidden' if result.page_restricted else ''}"
            )
        return result
