# app/core/config.py - Consolidated

import os
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Shopify Admin API
    SHOPIFY_SHOP_URL: Optional[str] = None
    SHOPIFY_ADMIN_API_ACCESS_TOKEN: Optional[str] = None
    SHOPIFY_API_VERSION: str = "2024-10"

    # Metafield holding the visibility flag
    VISIBILITY_NAMESPACE: str = "visibility_manager"
    VISIBILITY_KEY: str = "hidden"

    # Admin listing
    PRODUCTS_PAGE_SIZE: int = 20
    HIDDEN_PRODUCTS_LIMIT: int = 250
    BULK_MAX_CONCURRENCY: int = 1

    # Storefront matcher
    HIDDEN_PRODUCTS_ENDPOINT: str = "/apps/product-visibility/api/hidden-products"
    STOREFRONT_FETCH_TIMEOUT: float = 10.0

    # Basic Auth
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: Optional[str] = None

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

