"""
A storefront page held in memory as a parsed document.

Theme code that injects or replaces content (infinite scroll, AJAX cart,
section rendering) goes through the mutation methods, which notify every
registered observer once per change.
"""

import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

MutationObserver = Callable[[str], None]


def parse_fragment(html: str) -> List:
    fragment = BeautifulSoup(html, "html.parser")
    return list(fragment.contents)


class StorefrontPage:

    def __init__(self, html: str, url: Optional[str] = None):
        self.url = url
        self.document = BeautifulSoup(html, "lxml")
        self._observers: List[MutationObserver] = []

    def observe(self, callback: MutationObserver) -> Callable[[], None]:
        """Register a mutation callback; returns a function that unregisters it"""
        self._observers.append(callback)

        def disconnect():
            if callback in self._observers:
                self._observers.remove(callback)

        return disconnect

    def _notify(self, kind: str):
        for callback in list(self._observers):
            callback(kind)

    def _target(self, selector: str) -> Tag:
        target = self.document.select_one(selector)
        if target is None:
            raise LookupError(f"No element matches {selector!r}")
        return target

    def append_html(self, selector: str, html: str):
        target = self._target(selector)
        for node in parse_fragment(html):
            target.append(node)
        self._notify("childList")

    def replace_html(self, selector: str, html: str):
        """Replace the children of the first match, like a section re-render"""
        target = self._target(selector)
        target.clear()
        for node in parse_fragment(html):
            target.append(node)
        self._notify("childList")

    def remove(self, selector: str) -> int:
        removed = self.document.select(selector)
        for element in removed:
            element.decompose()
        if removed:
            self._notify("childList")
        return len(removed)

    def render(self) -> str:
        return str(self.document)
