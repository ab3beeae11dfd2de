from fastapi import Depends, HTTPException, Request

from app.core.config import Settings, get_settings
from app.schemas.visibility import VisibilitySettings
from app.services.shopify.client import ShopifyGraphQLClient
from app.services.visibility_service import VisibilityService


def get_shopify_client(settings: Settings = Depends(get_settings)) -> ShopifyGraphQLClient:
    """Dependency for a Shopify Admin API client built from settings."""
    try:
        return ShopifyGraphQLClient(
            store_domain=settings.SHOPIFY_SHOP_URL,
            admin_api_token=settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN,
            api_version=settings.SHOPIFY_API_VERSION,
        )
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))


def get_visibility_service(
    client: ShopifyGraphQLClient = Depends(get_shopify_client),
    settings: Settings = Depends(get_settings),
) -> VisibilityService:
    return VisibilityService(client, settings)


def get_visibility_settings(request: Request) -> VisibilitySettings:
    """Overlay settings held on the application state."""
    settings = getattr(request.app.state, "visibility_settings", None)
    if settings is None:
        settings = VisibilitySettings()
        request.app.state.visibility_settings = settings
    return settings
