# app/routes/storefront.py
"""
Server-side restriction of storefront HTML.

The hidden set comes from the Admin API (unless the caller supplies one)
merged with whatever the page itself embeds.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app.core.config import Settings, get_settings
from app.dependencies import get_visibility_settings
from app.schemas.base import CamelSchema
from app.schemas.visibility import VisibilitySettings
from app.services.shopify.client import ShopifyGraphQLClient
from app.services.visibility_service import VisibilityService
from app.storefront.acquisition import (
    DataAttributeSource,
    HiddenSetProvider,
    InlineJsonSource,
    ProductPageJsonSource,
    StaticHiddenSetSource,
)
from app.storefront.config import DEFAULT_CONFIG
from app.storefront.manager import StorefrontVisibilityManager
from app.storefront.page import StorefrontPage

router = APIRouter(prefix="/storefront", tags=["storefront"])

logger = logging.getLogger(__name__)


class RestrictRequest(CamelSchema):
    html: str
    url: Optional[str] = None
    hidden_products: Optional[List[str]] = None


async def _admin_hidden_identifiers(settings: Settings) -> List[str]:
    try:
        client = ShopifyGraphQLClient(
            store_domain=settings.SHOPIFY_SHOP_URL,
            admin_api_token=settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN,
            api_version=settings.SHOPIFY_API_VERSION,
        )
    except ValueError as e:
        logger.warning(f"Admin API not configured, using page data only: {str(e)}")
        return []

    response = await VisibilityService(client, settings).get_hidden_products()
    identifiers: List[str] = []
    for product in response.hidden_products:
        identifiers.extend([product.id, product.handle])
    return identifiers


@router.post("/restrict", response_class=HTMLResponse)
async def restrict_html(
    body: RestrictRequest,
    settings: Settings = Depends(get_settings),
    visibility_settings: VisibilitySettings = Depends(get_visibility_settings),
):
    """Return the submitted page with hidden products restricted"""
    if body.hidden_products is not None:
        known = body.hidden_products
    else:
        known = await _admin_hidden_identifiers(settings)

    config = DEFAULT_CONFIG.with_settings(visibility_settings)
    provider = HiddenSetProvider(
        [
            StaticHiddenSetSource(known),
            InlineJsonSource(),
            DataAttributeSource(config.namespace, config.metafield_key),
            ProductPageJsonSource(config.namespace, config.metafield_key),
        ],
        timeout=settings.STOREFRONT_FETCH_TIMEOUT,
    )

    page = StorefrontPage(body.html, url=body.url)
    manager = StorefrontVisibilityManager(page, provider=provider, config=config)
    result = await manager.run_once()

    return HTMLResponse(
        content=page.render(),
        headers={
            "X-PVM-Restricted": str(result.restricted),
            "X-PVM-Page-Restricted": "true" if result.page_restricted else "false",
        },
    )
