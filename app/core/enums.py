"""
Shared enums and constants used across the application.
"""

from enum import Enum

GID_PRODUCT_PREFIX = "gid://shopify/Product/"


class VisibilityFilter(str, Enum):
    """Admin listing filter on the hidden metafield"""
    ALL = "all"
    VISIBLE = "visible"
    HIDDEN = "hidden"


class PageDirection(str, Enum):
    """Cursor pagination direction"""
    FORWARD = "forward"
    BACKWARD = "backward"


class VisibilityAction(str, Enum):
    """Action types accepted by the admin action endpoint"""
    TOGGLE = "toggle"
    BULK_HIDE = "bulk-hide"
    BULK_SHOW = "bulk-show"


class ScanState(str, Enum):
    """Storefront re-evaluation scheduler states"""
    IDLE = "idle"
    SCANNING = "scanning"
