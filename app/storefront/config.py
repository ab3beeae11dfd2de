"""Storefront restriction constants."""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from app.schemas.visibility import VisibilitySettings


# Elements a theme commonly renders one product into
PRODUCT_CARD_SELECTORS: Tuple[str, ...] = (
    ".product-card",
    ".product-item",
    ".grid__item",
    ".card--product",
    ".product-grid-item",
    "article.product",
    ".collection-product",
    "[data-product-card]",
    ".product-tile",
    ".product-block",
)

# Anchors and data attributes that point at a single product
PRODUCT_REFERENCE_SELECTORS: Tuple[str, ...] = (
    'a[href*="/products/"]',
    "[data-product-handle]",
    "[data-product-id]",
)

# Nearest-ancestor candidates when a reference sits inside a card
CONTAINER_SELECTORS: Tuple[str, ...] = (
    ".grid__item",
    ".product-item",
    ".product-card",
    ".card--product",
    "article",
    "li",
)

# Elements that cannot hold the overlay; restriction moves to the nearest block ancestor
INLINE_TAGS = frozenset({"a", "button", "span", "p", "strong", "em", "b", "i", "small", "label"})

PRODUCT_PAGE_SECTION_SELECTOR = '.product, .product-section, main[role="main"]'

RESTRICTED_CLASS = "product-visibility-restricted"
PROCESSED_ATTR = "data-pvm-processed"
ORIGINAL_HREF_ATTR = "data-original-href"
ORIGINAL_STYLE_ATTR = "data-pvm-original-style"

WRAPPER_CLASS = "visibility-protection-wrapper"
CLICK_BLOCKER_CLASS = "visibility-click-blocker"
OVERLAY_CLASS = "visibility-overlay"
OVERLAY_CONTENT_CLASS = "visibility-overlay-content"
OVERLAY_ICON_CLASS = "visibility-overlay-icon"
OVERLAY_MESSAGE_CLASS = "visibility-overlay-message"
OVERLAY_LINK_CLASS = "visibility-overlay-link"
BADGE_CLASS = "visibility-vip-badge"
PAGE_OVERLAY_CLASS = "pvm-page-overlay"

INLINE_DATA_SCRIPT_ID = "product-visibility-data"


@dataclass(frozen=True)
class RestrictionConfig:
    enabled: bool = True
    hide_completely: bool = False
    api_endpoint: Optional[str] = "/apps/product-visibility/api/hidden-products"
    namespace: str = "visibility_manager"
    metafield_key: str = "hidden"
    blur_amount: int = 8
    overlay_text: str = "VIP Members Only"
    overlay_detail: str = "This product is exclusively available to VIP members."
    button_text: str = "Get VIP Access"
    button_url: str = "/pages/vip-membership"
    icon: str = "\U0001F512"
    show_badge: bool = True
    badge_text: str = "VIP ONLY"
    overlay_bg: str = "#ffffff"
    button_bg: str = "#000000"
    poll_interval: Optional[float] = 3.0
    debounce_delay: float = 0.2

    def with_settings(self, settings: VisibilitySettings) -> "RestrictionConfig":
        """Copy with the overlay fields taken from admin settings"""
        return replace(
            self,
            overlay_text=settings.message,
            button_text=settings.button_text,
            button_url=settings.button_url,
            blur_amount=settings.blur_amount,
            overlay_bg=settings.overlay_bg,
            button_bg=settings.button_bg,
        )


DEFAULT_CONFIG = RestrictionConfig()
