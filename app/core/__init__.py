"""
Core module exports.
"""
from .enums import (
    GID_PRODUCT_PREFIX,
    VisibilityFilter,
    PageDirection,
    VisibilityAction,
    ScanState,
)

from .exceptions import (
    BaseServiceError,
    PlatformServiceError,
    ShopifyServiceError,
    ShopifyAPIError,
    ShopifyGraphQLError,
    VisibilityUpdateError,
    HiddenSetSourceError,
)
