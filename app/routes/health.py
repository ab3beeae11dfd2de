from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "Product Visibility Manager",
        "shopify_configured": bool(settings.SHOPIFY_SHOP_URL and settings.SHOPIFY_ADMIN_API_ACCESS_TOKEN),
    }
