# app/routes/hidden_products.py
"""
Public endpoint the storefront reads the hidden set from.

Always answers 200 with a CORS-open JSON body; on failure the body carries an
empty list and success=false.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.schemas.visibility import HiddenProductsResponse
from app.services.shopify.client import ShopifyGraphQLClient
from app.services.visibility_service import VisibilityService

router = APIRouter(prefix="/api", tags=["storefront"])

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
}


def _response(body: HiddenProductsResponse) -> JSONResponse:
    return JSONResponse(
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=CORS_HEADERS,
    )


@router.get("/hidden-products", response_model=HiddenProductsResponse)
async def hidden_products(settings: Settings = Depends(get_settings)):
    try:
        client = ShopifyGraphQLClient(
            store_domain=settings.SHOPIFY_SHOP_URL,
            admin_api_token=settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN,
            api_version=settings.SHOPIFY_API_VERSION,
        )
    except ValueError as e:
        logger.error(f"Hidden products endpoint not configured: {str(e)}")
        return _response(HiddenProductsResponse(
            success=False, hidden_products=[], count=0, error="Unable to fetch hidden products"
        ))

    service = VisibilityService(client, settings)
    return _response(await service.get_hidden_products())
