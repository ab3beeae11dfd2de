# app/routes/visibility.py
"""
Admin console API for product visibility.

- Listing products with search, visibility filter and cursor pagination
- Toggling one product, or bulk hiding/showing a selection
- Reading and saving the storefront overlay settings
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError

from app.core.enums import PageDirection, VisibilityAction, VisibilityFilter
from app.dependencies import get_visibility_service, get_visibility_settings
from app.schemas.visibility import ActionResult, ProductPage, VisibilitySettings
from app.services.visibility_service import VisibilityService

router = APIRouter(prefix="/api", tags=["visibility"])

logger = logging.getLogger(__name__)


async def _read_payload(request: Request) -> Dict[str, Any]:
    """Action payload from a JSON body or a submitted form"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        payload = await request.json()
        return payload if isinstance(payload, dict) else {}
    form_data = await request.form()
    return dict(form_data)


def _parse_product_ids(raw: Any) -> List[str]:
    if isinstance(raw, list):
        return [str(product_id) for product_id in raw]
    if isinstance(raw, str) and raw:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(product_id) for product_id in parsed]
    return []


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).lower() == "true"


@router.get("/products", response_model=ProductPage)
async def list_products(
    search: str = "",
    cursor: Optional[str] = None,
    direction: PageDirection = PageDirection.FORWARD,
    visibility: VisibilityFilter = VisibilityFilter.ALL,
    limit: Optional[int] = Query(None, ge=1, le=250),
    service: VisibilityService = Depends(get_visibility_service),
):
    """One page of products with their hidden flag"""
    return await service.list_products(
        search_term=search,
        cursor=cursor,
        direction=direction,
        visibility=visibility,
        limit=limit,
    )


@router.post("/products/actions", response_model=ActionResult, response_model_exclude_none=True)
async def product_action(
    request: Request,
    service: VisibilityService = Depends(get_visibility_service),
):
    """Run a toggle, bulk-hide or bulk-show action"""
    try:
        payload = await _read_payload(request)
        action = VisibilityAction(payload.get("actionType"))
    except ValueError:
        return ActionResult(success=False)

    try:
        if action == VisibilityAction.TOGGLE:
            product_id = payload.get("productId")
            if not product_id:
                return ActionResult(success=False, error="productId is required")
            return await service.toggle_product(str(product_id), _parse_bool(payload.get("currentStatus")))

        product_ids = _parse_product_ids(payload.get("productIds"))
        max_concurrency = payload.get("maxConcurrency")
        return await service.bulk_set_visibility(
            product_ids,
            hidden=action == VisibilityAction.BULK_HIDE,
            max_concurrency=int(max_concurrency) if max_concurrency else None,
        )
    except Exception as e:
        logger.error(f"Action error: {str(e)}")
        return ActionResult(success=False, error="Failed to update product visibility")


@router.get("/settings", response_model=VisibilitySettings)
async def get_settings_view(settings: VisibilitySettings = Depends(get_visibility_settings)):
    return settings


@router.post("/settings")
async def save_settings(request: Request):
    """Replace the overlay settings used by storefront restriction"""
    try:
        payload = await _read_payload(request)
        settings = VisibilitySettings.model_validate(payload)
    except (PydanticValidationError, ValueError) as e:
        logger.warning(f"Rejected settings: {str(e)}")
        return {"success": False, "error": "Invalid settings"}

    request.app.state.visibility_settings = settings
    logger.info("Visibility settings saved")
    return {"success": True, "message": "Settings saved", "settings": settings.model_dump(by_alias=True)}
