# File: app/schemas/visibility.py

from typing import Optional, List

from pydantic import Field, field_validator

from app.core.enums import GID_PRODUCT_PREFIX, VisibilityFilter
from app.schemas.base import CamelSchema


class FeaturedImage(CamelSchema):
    url: str
    alt_text: Optional[str] = None


class Product(CamelSchema):
    id: str
    title: str
    handle: str
    status: str
    featured_image: Optional[FeaturedImage] = None
    is_hidden: bool = False

    @property
    def short_id(self) -> str:
        return self.id.replace(GID_PRODUCT_PREFIX, "")

    @classmethod
    def from_node(cls, node: dict) -> "Product":
        """Build a Product from a GraphQL product node"""
        metafield = node.get("metafield") or {}
        return cls(
            id=node["id"],
            title=node.get("title") or "",
            handle=node.get("handle") or "",
            status=node.get("status") or "",
            featured_image=node.get("featuredImage"),
            is_hidden=metafield.get("value") == "true",
        )


class PageInfo(CamelSchema):
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


class VisibilityStats(CamelSchema):
    visible_count: int = 0
    hidden_count: int = 0
    page_count: int = 0

    @classmethod
    def for_products(cls, products: List[Product]) -> "VisibilityStats":
        hidden = sum(1 for p in products if p.is_hidden)
        return cls(
            visible_count=len(products) - hidden,
            hidden_count=hidden,
            page_count=len(products),
        )


class ProductPage(CamelSchema):
    products: List[Product] = []
    page_info: PageInfo = Field(default_factory=PageInfo)
    search_term: str = ""
    visibility_filter: VisibilityFilter = VisibilityFilter.ALL
    stats: VisibilityStats = Field(default_factory=VisibilityStats)


class ActionResult(CamelSchema):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    success_count: Optional[int] = None
    failure_count: Optional[int] = None


class HiddenProduct(CamelSchema):
    id: str
    handle: str


class HiddenProductsResponse(CamelSchema):
    success: bool
    hidden_products: List[HiddenProduct] = []
    count: int = 0
    error: Optional[str] = None


class VisibilitySettings(CamelSchema):
    """Overlay settings edited from the admin console"""
    message: str = "VIP Members Only"
    button_text: str = "Get VIP Access"
    button_url: str = "/pages/vip-membership"
    blur_amount: int = 8
    overlay_bg: str = "#ffffff"
    button_bg: str = "#000000"

    @field_validator("blur_amount")
    @classmethod
    def blur_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("blur_amount must be zero or positive")
        return value
