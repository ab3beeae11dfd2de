# app.services.shopify.client

import json
import logging
import asyncio
import httpx
from typing import Dict, List, Optional, Any

from app.core.config import get_settings
from app.core.enums import PageDirection
from app.core.exceptions import ShopifyAPIError, ShopifyGraphQLError
from app.services.shopify.queries import (
    QUERY_PRODUCTS_PAGE,
    QUERY_HIDDEN_PRODUCTS,
    MUTATION_METAFIELDS_SET,
)

logger = logging.getLogger(__name__)


class ShopifyGraphQLClient:
    """
    Asynchronous client for the Shopify GraphQL Admin API.

    Read operations:
      - get_products_page()      cursor-paginated product listing with the visibility metafield
      - get_hidden_products()    every product whose visibility metafield is true

    Write operations:
      - set_metafields()
      - set_product_visibility()

    Infrastructure:
      - execute() / _make_request()   cost-based throttling from extensions.cost.throttleStatus
    """

    # --- Meta/Infrastructure ---

    def __init__(
        self,
        store_domain: Optional[str] = None,
        admin_api_token: Optional[str] = None,
        api_version: Optional[str] = None,
        safety_buffer_percentage: float = 0.25,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        self.store_domain = store_domain or settings.SHOPIFY_SHOP_URL
        self.admin_api_token = admin_api_token or settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout

        if not self.store_domain or not self.admin_api_token:
            raise ValueError(
                "SHOPIFY_SHOP_URL and SHOPIFY_ADMIN_API_ACCESS_TOKEN must be set in .env or as environment variables."
            )

        self.graphql_url = f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"
        self.headers = {
            "X-Shopify-Access-Token": self.admin_api_token,
            "Content-Type": "application/json"
        }

        # Initialize throttle status - will be updated after the first call
        self.safety_buffer_percentage = safety_buffer_percentage
        self.max_available_points = 1000.0
        self.currently_available_points = self.max_available_points
        self.restore_rate = 50.0
        self.safety_buffer_points = self.max_available_points * safety_buffer_percentage

        logger.info(f"ShopifyGraphQLClient initialized for {self.store_domain} (API version {self.api_version})")

    async def execute(self, query: str, variables: Optional[dict] = None, estimated_cost: int = 10) -> Dict[str, Any]:
        return await self._make_request(query, variables, estimated_cost)

    def _update_throttle_status(self, extensions: Optional[dict]):
        if extensions and "cost" in extensions:
            throttle = extensions["cost"].get("throttleStatus") or {}
            if not throttle:
                return
            self.max_available_points = float(throttle["maximumAvailable"])
            self.currently_available_points = float(throttle["currentlyAvailable"])
            self.restore_rate = float(throttle["restoreRate"])
            self.safety_buffer_points = self.max_available_points * self.safety_buffer_percentage
            logger.debug(
                f"Throttle status: available={self.currently_available_points}, "
                f"max={self.max_available_points}, restore={self.restore_rate}"
            )

    async def _wait_for_points(self, estimated_cost: int):
        required_points = estimated_cost + self.safety_buffer_points
        if self.currently_available_points >= required_points:
            return

        points_needed = required_points - self.currently_available_points
        wait_time = (points_needed / self.restore_rate) if self.restore_rate > 0 else 10
        wait_time = max(wait_time, 0) + 0.5

        logger.warning(
            f"Rate limit approaching: only {self.currently_available_points} points available, "
            f"need ~{required_points}. Waiting {wait_time:.2f}s"
        )
        await asyncio.sleep(wait_time)
        # Shopify reports the real figure on the next response
        self.currently_available_points = min(
            self.max_available_points,
            self.currently_available_points + (self.restore_rate * wait_time)
        )

    async def _make_request(self, query: str, variables: Optional[dict] = None, estimated_cost: int = 10) -> Dict[str, Any]:
        """
        Makes a GraphQL request to Shopify, handling rate limits.

        Returns the ``data`` member of the response.

        Raises:
            ShopifyGraphQLError: the response carried GraphQL errors or was not JSON
            ShopifyAPIError: transport failure or non-200 status
        """
        await self._wait_for_points(estimated_cost)

        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug(f"GraphQL request to {self.graphql_url}: {query.strip()[:80]}...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.graphql_url, headers=self.headers, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Shopify request timed out: {str(e)}")
            raise ShopifyAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Shopify network error: {str(e)}")
            raise ShopifyAPIError(f"Network error: {str(e)}")

        if response.status_code == 429:
            logger.warning("Received 429 Too Many Requests from Shopify")
            # Force the next call through the wait path
            self.currently_available_points = 0
            raise ShopifyAPIError(f"Rate limited: {response.text}")

        if response.status_code != 200:
            logger.error(f"Shopify API error {response.status_code}: {response.text}")
            raise ShopifyAPIError(f"Request failed ({response.status_code}): {response.text}")

        try:
            response_data = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(f"Failed to decode JSON response. Content: {response.text[:500]}")
            raise ShopifyGraphQLError([{"message": "Failed to decode JSON response"}])

        self._update_throttle_status(response_data.get("extensions"))

        if response_data.get("errors"):
            raise ShopifyGraphQLError(response_data["errors"])

        return response_data.get("data") or {}

    # --- Read operations ---

    @staticmethod
    def build_page_variables(
        direction: PageDirection = PageDirection.FORWARD,
        cursor: Optional[str] = None,
        query: Optional[str] = None,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """
        Pagination variables for QUERY_PRODUCTS_PAGE.

        Backward pages use last/before, forward pages first/after.
        """
        if PageDirection(direction) == PageDirection.BACKWARD:
            return {"last": limit, "before": cursor, "query": query}
        return {"first": limit, "after": cursor, "query": query}

    async def get_products_page(
        self,
        *,
        direction: PageDirection = PageDirection.FORWARD,
        cursor: Optional[str] = None,
        query: Optional[str] = None,
        limit: int = 20,
        namespace: str = "visibility_manager",
        key: str = "hidden",
    ) -> Dict[str, Any]:
        """Fetch one page of products; returns the ``products`` connection."""
        variables = self.build_page_variables(direction, cursor, query, limit)
        variables.update({"namespace": namespace, "key": key})
        data = await self.execute(QUERY_PRODUCTS_PAGE, variables, estimated_cost=limit + 2)
        return data.get("products") or {}

    async def get_hidden_products(
        self,
        namespace: str = "visibility_manager",
        key: str = "hidden",
        limit: int = 250,
    ) -> List[Dict[str, Any]]:
        """Product nodes (id, handle) whose visibility metafield is true"""
        variables = {"first": limit, "query": f"metafield:{namespace}.{key}:true"}
        data = await self.execute(QUERY_HIDDEN_PRODUCTS, variables, estimated_cost=limit // 10 + 2)
        edges = (data.get("products") or {}).get("edges") or []
        return [edge["node"] for edge in edges if edge.get("node")]

    # --- Write operations ---

    async def set_metafields(self, metafields: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Run metafieldsSet; returns the mutation payload including userErrors"""
        data = await self.execute(MUTATION_METAFIELDS_SET, {"metafields": metafields})
        return data.get("metafieldsSet") or {}

    async def set_product_visibility(
        self,
        product_gid: str,
        hidden: bool,
        namespace: str = "visibility_manager",
        key: str = "hidden",
    ) -> Dict[str, Any]:
        metafield = {
            "ownerId": product_gid,
            "namespace": namespace,
            "key": key,
            "value": "true" if hidden else "false",
            "type": "boolean",
        }
        return await self.set_metafields([metafield])
