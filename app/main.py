# app/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.core.security import require_auth
from app.schemas.visibility import VisibilitySettings

from app.routes import health, visibility, hidden_products, storefront

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.visibility_settings = VisibilitySettings()
    if not (settings.SHOPIFY_SHOP_URL and settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN):
        print("Shopify Admin API is not configured; admin and hidden-products endpoints will report errors")
    yield


app = FastAPI(
    title="Product Visibility Manager",
    debug=get_settings().DEBUG,
    lifespan=lifespan
)

# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    response = await call_next(request)
    return response

# Admin console requires authentication
app.include_router(visibility.router, dependencies=[require_auth()])
# Storefront-facing routes and health check are public
app.include_router(hidden_products.router)
app.include_router(storefront.router)
app.include_router(health.router)


@app.get("/", dependencies=[require_auth()])
async def root():
    return RedirectResponse(url="/api/products")
