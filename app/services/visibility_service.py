# app/services/visibility_service.py
import asyncio
import logging
from typing import Optional, List, Tuple

from app.core.config import Settings, get_settings
from app.core.enums import GID_PRODUCT_PREFIX, PageDirection, VisibilityFilter
from app.core.exceptions import VisibilityUpdateError
from app.schemas.visibility import (
    ActionResult,
    HiddenProduct,
    HiddenProductsResponse,
    PageInfo,
    Product,
    ProductPage,
    VisibilityStats,
)
from app.services.shopify.client import ShopifyGraphQLClient

logger = logging.getLogger(__name__)


def build_search_query(search_term: Optional[str]) -> Optional[str]:
    """Shopify product search string for a title search, or None for no filter"""
    query_parts = []
    if search_term:
        query_parts.append(f"title:*{search_term}*")
    # Shopify search can't filter on metafield values here; visibility is filtered after fetch
    return " AND ".join(query_parts) or None


def filter_by_visibility(products: List[Product], visibility: VisibilityFilter) -> List[Product]:
    if visibility == VisibilityFilter.HIDDEN:
        return [p for p in products if p.is_hidden]
    if visibility == VisibilityFilter.VISIBLE:
        return [p for p in products if not p.is_hidden]
    return list(products)


class VisibilityService:
    """Product visibility operations over the Shopify Admin API."""

    # =========================================================================
    # 1. INITIALIZATION
    # =========================================================================
    def __init__(self, client: ShopifyGraphQLClient, settings: Settings = None):
        self.client = client
        self.settings = settings or get_settings()
        self.namespace = self.settings.VISIBILITY_NAMESPACE
        self.key = self.settings.VISIBILITY_KEY

    # =========================================================================
    # 2. LISTING
    # =========================================================================
    async def list_products(
        self,
        search_term: str = "",
        cursor: Optional[str] = None,
        direction: PageDirection = PageDirection.FORWARD,
        visibility: VisibilityFilter = VisibilityFilter.ALL,
        limit: Optional[int] = None,
    ) -> ProductPage:
        """
        Load one page of products with their hidden flag.

        Failures are logged and produce an empty page so the console still renders.
        """
        limit = limit or self.settings.PRODUCTS_PAGE_SIZE
        try:
            connection = await self.client.get_products_page(
                direction=direction,
                cursor=cursor or None,
                query=build_search_query(search_term),
                limit=limit,
                namespace=self.namespace,
                key=self.key,
            )
        except Exception as e:
            logger.error(f"Loader error: {str(e)}")
            return ProductPage(search_term=search_term, visibility_filter=visibility)

        edges = connection.get("edges") or []
        products = [Product.from_node(edge["node"]) for edge in edges if edge.get("node")]
        filtered = filter_by_visibility(products, visibility)
        page_info = PageInfo.model_validate(connection.get("pageInfo") or {})

        return ProductPage(
            products=filtered,
            page_info=page_info,
            search_term=search_term,
            visibility_filter=visibility,
            stats=VisibilityStats.for_products(filtered),
        )

    # =========================================================================
    # 3. TOGGLES
    # =========================================================================
    async def _set_hidden(self, product_id: str, hidden: bool):
        """Set the flag on one product; raises VisibilityUpdateError on user errors"""
        payload = await self.client.set_product_visibility(
            product_id, hidden, namespace=self.namespace, key=self.key
        )
        user_errors = payload.get("userErrors") or []
        if user_errors:
            raise VisibilityUpdateError(product_id, user_errors)

    async def toggle_product(self, product_id: str, currently_hidden: bool) -> ActionResult:
        """Set the flag to the negation of the state the client saw"""
        target = not currently_hidden
        try:
            await self._set_hidden(product_id, target)
        except VisibilityUpdateError as e:
            logger.warning(f"Toggle rejected for {product_id}: {str(e)}")
            return ActionResult(success=False, error=str(e))
        except Exception as e:
            logger.error(f"Action error: {str(e)}")
            return ActionResult(success=False, error="Failed to update product visibility")

        logger.info(f"Product {product_id} {'hidden' if target else 'shown'}")
        return ActionResult(
            success=True,
            message=f"Product {'hidden' if target else 'shown'} successfully!",
        )

    async def bulk_set_visibility(
        self,
        product_ids: List[str],
        hidden: bool,
        max_concurrency: Optional[int] = None,
    ) -> ActionResult:
        """
        Apply one target value to every product.

        Items run sequentially by default; errors are collected per item and the
        loop continues. Partial success is reported, never rolled back.
        """
        max_concurrency = max(1, max_concurrency or self.settings.BULK_MAX_CONCURRENCY)
        semaphore = asyncio.Semaphore(max_concurrency)

        async def update_one(product_id: str) -> Tuple[str, Optional[str]]:
            async with semaphore:
                try:
                    await self._set_hidden(product_id, hidden)
                    return product_id, None
                except Exception as e:
                    logger.warning(f"Bulk update failed for {product_id}: {str(e)}")
                    return product_id, str(e)

        if max_concurrency == 1:
            results = [await update_one(product_id) for product_id in product_ids]
        else:
            results = await asyncio.gather(*(update_one(product_id) for product_id in product_ids))

        errors = [error for _, error in results if error]
        success_count = len(results) - len(errors)
        verb = "hidden" if hidden else "shown"
        logger.info(f"Bulk visibility update: {success_count} {verb}, {len(errors)} failed")

        if errors:
            return ActionResult(
                success=False,
                error=f"Failed to update {len(errors)} products",
                success_count=success_count,
                failure_count=len(errors),
            )

        return ActionResult(
            success=True,
            message=f"{success_count} products {verb} successfully!",
            success_count=success_count,
            failure_count=0,
        )

    # =========================================================================
    # 4. HIDDEN SET
    # =========================================================================
    async def get_hidden_products(self) -> HiddenProductsResponse:
        """Hidden products for the storefront, with the gid prefix stripped from ids"""
        try:
            nodes = await self.client.get_hidden_products(
                namespace=self.namespace,
                key=self.key,
                limit=self.settings.HIDDEN_PRODUCTS_LIMIT,
            )
        except Exception as e:
            logger.error(f"Unable to fetch hidden products: {str(e)}")
            return HiddenProductsResponse(
                success=False,
                hidden_products=[],
                count=0,
                error="Unable to fetch hidden products",
            )

        hidden_products = [
            HiddenProduct(id=node["id"].replace(GID_PRODUCT_PREFIX, ""), handle=node.get("handle") or "")
            for node in nodes
        ]
        return HiddenProductsResponse(
            success=True,
            hidden_products=hidden_products,
            count=len(hidden_products),
        )
