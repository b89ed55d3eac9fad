# formhooks/api/routes_webhooks.py
"""
Webhook mapping API routes.

The settings screen reads the whole table and saves it back whole.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..webhooks import ValidationError, WebhookRegistry
from .deps import get_registry

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


class WebhookMappingIn(BaseModel):
    """One row of the mapping table."""
    # Optional so that missing values are reported per row by the registry
    form_id: Optional[Union[int, str]] = None
    webhook_url: Optional[str] = None


class ReplaceWebhooksRequest(BaseModel):
    """Complete replacement table."""
    webhooks: List[WebhookMappingIn]


@router.get("")
async def list_webhooks(registry: WebhookRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """
    List all webhook mappings in saved order.

    Returns:
        Mappings and count
    """
    mappings = registry.list()
    return {
        "webhooks": [m.to_dict() for m in mappings],
        "count": len(mappings),
    }


@router.put("")
async def replace_webhooks(
    request: ReplaceWebhooksRequest,
    registry: WebhookRegistry = Depends(get_registry),
):
    """
    Replace the whole mapping table.

    If any row is invalid nothing is saved and the response lists every
    problem as {index, field, message}.

    Args:
        request: The new table

    Returns:
        Saved mappings and count
    """
    rows = [row.model_dump() for row in request.webhooks]
    try:
        mappings = registry.replace(rows)
    except ValidationError as e:
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Invalid webhook mappings",
                "errors": [err.to_dict() for err in e.errors],
            },
        )

    return {
        "webhooks": [m.to_dict() for m in mappings],
        "count": len(mappings),
    }
