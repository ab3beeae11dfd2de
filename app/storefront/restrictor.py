"""
Restriction overlay for matched product elements.

A restricted element keeps its original content in the document, blurred and
inert, with an overlay carrying the message and call-to-action appended to it.
Everything the restrictor changes is backed up on the element so `unrestrict`
can put it back.
"""

import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup, Tag

from app.storefront.config import (
    BADGE_CLASS,
    CLICK_BLOCKER_CLASS,
    DEFAULT_CONFIG,
    ORIGINAL_HREF_ATTR,
    ORIGINAL_STYLE_ATTR,
    OVERLAY_CLASS,
    OVERLAY_CONTENT_CLASS,
    OVERLAY_ICON_CLASS,
    OVERLAY_LINK_CLASS,
    OVERLAY_MESSAGE_CLASS,
    PAGE_OVERLAY_CLASS,
    PROCESSED_ATTR,
    PRODUCT_PAGE_SECTION_SELECTOR,
    RESTRICTED_CLASS,
    RestrictionConfig,
    WRAPPER_CLASS,
)

logger = logging.getLogger(__name__)

ORIGINAL_ONCLICK_ATTR = "data-pvm-original-onclick"
WAS_DISABLED_ATTR = "data-pvm-was-disabled"

BLOCK_CLICK = "event.preventDefault(); return false;"
BLOCK_CONTEXT_MENU = (
    f"if (!event.target.classList.contains('{OVERLAY_LINK_CLASS}')) {{ event.preventDefault(); }}"
)


def parse_style(style: Optional[str]) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    for part in (style or "").split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        if name.strip():
            declarations[name.strip().lower()] = value.strip()
    return declarations


def format_style(declarations: Dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items())


def _classes(tag: Tag) -> list:
    classes = tag.get("class") or []
    return classes.split() if isinstance(classes, str) else list(classes)


def _save_style(tag: Tag):
    if ORIGINAL_STYLE_ATTR not in tag.attrs:
        tag[ORIGINAL_STYLE_ATTR] = tag.get("style", "")


def _restore_style(tag: Tag):
    if ORIGINAL_STYLE_ATTR not in tag.attrs:
        return
    original = tag.attrs.pop(ORIGINAL_STYLE_ATTR)
    if original:
        tag["style"] = original
    elif "style" in tag.attrs:
        del tag["style"]


def _apply_style(tag: Tag, **properties: str):
    _save_style(tag)
    declarations = parse_style(tag.get("style"))
    for name, value in properties.items():
        declarations[name.replace("_", "-")] = value
    tag["style"] = format_style(declarations)


def _self_and_descendants(container: Tag, name: str) -> list:
    found = container.find_all(name)
    return [container] + found if container.name == name else found


def is_restricted(element: Tag) -> bool:
    return RESTRICTED_CLASS in _classes(element)


def is_overlay_part(element: Tag) -> bool:
    """True for the overlay/badge the restrictor itself inserted"""
    own = {WRAPPER_CLASS, BADGE_CLASS, PAGE_OVERLAY_CLASS}
    if own.intersection(_classes(element)):
        return True
    return any(own.intersection(_classes(parent)) for parent in element.parents if isinstance(parent, Tag))


class Restrictor:
    """Applies and removes the restriction overlay on single elements."""

    def __init__(self, config: RestrictionConfig = DEFAULT_CONFIG):
        self.config = config
        self._factory = BeautifulSoup("", "html.parser")

    # --- building blocks ---

    def _tag(self, name: str, css_class: Optional[str] = None, style: Optional[str] = None, text: Optional[str] = None, **attrs) -> Tag:
        tag = self._factory.new_tag(name, attrs=attrs)
        if css_class:
            tag["class"] = [css_class]
        if style:
            tag["style"] = style
        if text:
            tag.string = text
        return tag

    def _cta_link(self, style: str) -> Optional[Tag]:
        if not (self.config.button_text and self.config.button_url):
            return None
        return self._tag("a", OVERLAY_LINK_CLASS, style, self.config.button_text, href=self.config.button_url)

    def build_overlay(self) -> Tag:
        cfg = self.config
        wrapper = self._tag(
            "div", WRAPPER_CLASS,
            "position: absolute; top: 0; left: 0; width: 100%; height: 100%; z-index: 10",
        )
        wrapper.append(self._tag(
            "div", CLICK_BLOCKER_CLASS,
            "position: absolute; top: 0; left: 0; width: 100%; height: 100%",
        ))

        overlay = self._tag(
            "div", OVERLAY_CLASS,
            f"position: absolute; top: 50%; left: 50%; transform: translate(-50%, -50%); "
            f"background: {cfg.overlay_bg}; padding: 20px; border-radius: 8px; text-align: center; "
            f"box-shadow: 0 2px 10px rgba(0,0,0,0.1); min-width: 200px",
        )
        content = self._tag("div", OVERLAY_CONTENT_CLASS)
        if cfg.icon:
            content.append(self._tag("div", OVERLAY_ICON_CLASS, "font-size: 32px; margin-bottom: 10px", cfg.icon))
        if cfg.overlay_text:
            content.append(self._tag("p", OVERLAY_MESSAGE_CLASS, "font-weight: 600; color: #333; margin-bottom: 10px", cfg.overlay_text))
        link = self._cta_link(
            f"display: inline-block; background: {cfg.button_bg}; color: white; padding: 8px 20px; "
            f"border-radius: 4px; text-decoration: none; font-size: 14px; pointer-events: auto"
        )
        if link is not None:
            content.append(link)
        overlay.append(content)
        wrapper.append(overlay)
        return wrapper

    def build_badge(self) -> Optional[Tag]:
        if not (self.config.show_badge and self.config.badge_text):
            return None
        return self._tag(
            "div", BADGE_CLASS,
            "position: absolute; top: 10px; right: 10px; background: #FFD700; color: #000; padding: 4px 10px; "
            "border-radius: 20px; font-size: 11px; font-weight: bold; text-transform: uppercase; z-index: 11",
            self.config.badge_text,
        )

    def build_page_overlay(self) -> Tag:
        cfg = self.config
        overlay = self._tag(
            "div", PAGE_OVERLAY_CLASS,
            f"position: fixed; top: 50%; left: 50%; transform: translate(-50%, -50%); background: {cfg.overlay_bg}; "
            f"padding: 30px; border-radius: 10px; text-align: center; z-index: 9999; "
            f"box-shadow: 0 4px 20px rgba(0,0,0,0.2); max-width: 400px",
        )
        if cfg.icon:
            overlay.append(self._tag("div", OVERLAY_ICON_CLASS, "font-size: 48px; margin-bottom: 15px", cfg.icon))
        overlay.append(self._tag("h2", OVERLAY_MESSAGE_CLASS, "margin: 0 0 15px 0; color: #333", cfg.overlay_text))
        if cfg.overlay_detail:
            overlay.append(self._tag("p", None, "color: #666; margin-bottom: 20px", cfg.overlay_detail))
        link = self._cta_link(
            f"display: inline-block; background: {cfg.button_bg}; color: white; padding: 12px 30px; "
            f"border-radius: 5px; text-decoration: none; font-weight: 600"
        )
        if link is not None:
            overlay.append(link)
        return overlay

    # --- interaction ---

    def _disable_interactive(self, container: Tag):
        for link in _self_and_descendants(container, "a"):
            if OVERLAY_LINK_CLASS in _classes(link):
                continue
            if link.get("href"):
                link[ORIGINAL_HREF_ATTR] = link["href"]
                del link["href"]
            if "onclick" in link.attrs and ORIGINAL_ONCLICK_ATTR not in link.attrs:
                link[ORIGINAL_ONCLICK_ATTR] = link["onclick"]
            link["onclick"] = BLOCK_CLICK
            _apply_style(link, pointer_events="none", cursor="not-allowed")

        for button in _self_and_descendants(container, "button"):
            if button.has_attr("disabled"):
                button[WAS_DISABLED_ATTR] = "true"
            button["disabled"] = ""
            _apply_style(button, pointer_events="none", cursor="not-allowed")

        container["oncontextmenu"] = BLOCK_CONTEXT_MENU

    def _enable_interactive(self, container: Tag):
        for link in _self_and_descendants(container, "a"):
            if ORIGINAL_HREF_ATTR in link.attrs:
                link["href"] = link.attrs.pop(ORIGINAL_HREF_ATTR)
            if link.get("onclick") == BLOCK_CLICK:
                del link["onclick"]
            if ORIGINAL_ONCLICK_ATTR in link.attrs:
                link["onclick"] = link.attrs.pop(ORIGINAL_ONCLICK_ATTR)

        for button in _self_and_descendants(container, "button"):
            if button.attrs.pop(WAS_DISABLED_ATTR, None) is None and button.has_attr("disabled"):
                del button["disabled"]

        if container.get("oncontextmenu") == BLOCK_CONTEXT_MENU:
            del container["oncontextmenu"]

    # --- public API ---

    def _mark(self, element: Tag):
        element["class"] = _classes(element) + [RESTRICTED_CLASS]
        element[PROCESSED_ATTR] = "true"

    def _unmark(self, element: Tag):
        remaining = [c for c in _classes(element) if c != RESTRICTED_CLASS]
        if remaining:
            element["class"] = remaining
        elif "class" in element.attrs:
            del element["class"]
        element.attrs.pop(PROCESSED_ATTR, None)

    def restrict(self, container: Tag) -> bool:
        """
        Restrict one element. Returns False when it was already restricted
        (or restriction is disabled), so repeated passes add nothing.
        """
        if not self.config.enabled or is_restricted(container):
            return False

        self._mark(container)

        if self.config.hide_completely:
            _apply_style(container, display="none")
            return True

        _apply_style(container, position="relative", overflow="hidden")
        for child in container.find_all(recursive=False):
            _apply_style(
                child,
                filter=f"blur({self.config.blur_amount}px)",
                opacity="0.4",
                pointer_events="none",
            )

        self._disable_interactive(container)

        container.append(self.build_overlay())
        badge = self.build_badge()
        if badge is not None:
            container.append(badge)
        return True

    def unrestrict(self, container: Tag) -> bool:
        """Undo `restrict`. Returns False when the element was not restricted."""
        if not is_restricted(container):
            return False

        for part in container.find_all(class_=[WRAPPER_CLASS, BADGE_CLASS], recursive=False):
            part.decompose()

        previous = container.find_previous_sibling()
        if isinstance(previous, Tag) and PAGE_OVERLAY_CLASS in _classes(previous):
            previous.decompose()

        self._enable_interactive(container)
        for tag in container.find_all(attrs={ORIGINAL_STYLE_ATTR: True}):
            _restore_style(tag)
        _restore_style(container)
        self._unmark(container)
        return True

    def restrict_product_page(self, document: BeautifulSoup) -> Optional[Tag]:
        """
        Blur the main product section and put a fixed overlay in front of it.
        Returns the section when it was restricted by this call.
        """
        if not self.config.enabled:
            return None
        section = document.select_one(PRODUCT_PAGE_SECTION_SELECTOR)
        if section is None or is_restricted(section):
            return None

        logger.info("Hiding product page")
        self._mark(section)
        _apply_style(
            section,
            filter=f"blur({self.config.blur_amount}px)",
            opacity="0.4",
            pointer_events="none",
        )
        section.insert_before(self.build_page_overlay())
        return section
