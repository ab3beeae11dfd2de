"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema, CamelSchema

# Visibility schemas
from .visibility import (
    FeaturedImage,
    Product,
    PageInfo,
    VisibilityStats,
    ProductPage,
    ActionResult,
    HiddenProduct,
    HiddenProductsResponse,
    VisibilitySettings,
)
