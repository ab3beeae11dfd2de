# tests/conftest.py
import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.main import app
from app.services.shopify.client import ShopifyGraphQLClient

TEST_AUTH = ("admin", "test-password")


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        SHOPIFY_SHOP_URL="test-shop.myshopify.com",
        SHOPIFY_ADMIN_API_ACCESS_TOKEN="shpat_test_token",
        SHOPIFY_API_VERSION="2024-10",
        BASIC_AUTH_USERNAME=TEST_AUTH[0],
        BASIC_AUTH_PASSWORD=TEST_AUTH[1],
    )


@pytest.fixture
def test_client(settings):
    """Provide a test client with overridden settings"""
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_shopify_client():
    """A ShopifyGraphQLClient stand-in with async methods"""
    client = MagicMock(spec=ShopifyGraphQLClient)
    client.get_products_page = AsyncMock(return_value={})
    client.get_hidden_products = AsyncMock(return_value=[])
    client.set_product_visibility = AsyncMock(return_value={"metafields": [{"id": "gid://shopify/Metafield/1"}], "userErrors": []})
    client.set_metafields = AsyncMock(return_value={"metafields": [], "userErrors": []})
    return client


def product_node(numeric_id: int, title: str, handle: str, hidden=None, status="ACTIVE"):
    """GraphQL product node as returned by the products page query"""
    return {
        "id": f"gid://shopify/Product/{numeric_id}",
        "title": title,
        "handle": handle,
        "status": status,
        "featuredImage": {"url": f"https://cdn.shopify.com/{handle}.jpg", "altText": title},
        "metafield": None if hidden is None else {"value": "true" if hidden else "false"},
    }


@pytest.fixture
def products_connection():
    return {
        "edges": [
            {"cursor": "c1", "node": product_node(101, "Stratocaster", "fender-stratocaster", hidden=True)},
            {"cursor": "c2", "node": product_node(102, "Les Paul", "gibson-les-paul", hidden=False)},
            {"cursor": "c3", "node": product_node(103, "JCM800", "marshall-jcm800")},
        ],
        "pageInfo": {
            "hasNextPage": True,
            "hasPreviousPage": False,
            "startCursor": "c1",
            "endCursor": "c3",
        },
    }


COLLECTION_HTML = """
<html>
<head><title>Guitars</title></head>
<body>
  <ul class="product-grid">
    <li class="grid__item">
      <div class="card--product" data-product-id="101">
        <a href="/products/fender-stratocaster" class="card__link">Stratocaster</a>
        <button type="button" class="quick-add">Add to cart</button>
      </div>
    </li>
    <li class="grid__item">
      <div class="card--product">
        <a href="/products/gibson-les-paul?variant=1">Les Paul</a>
        <button type="button" class="quick-add">Add to cart</button>
      </div>
    </li>
    <li class="grid__item">
      <div class="card--product" id="product-303">
        <span>JCM800</span>
      </div>
    </li>
  </ul>
</body>
</html>
"""


@pytest.fixture
def collection_html():
    return COLLECTION_HTML


@pytest.fixture
def auth():
    """Basic auth credentials matching the test settings"""
    return TEST_AUTH
