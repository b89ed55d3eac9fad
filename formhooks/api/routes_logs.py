# formhooks/api/routes_logs.py
"""
Delivery log API routes.

Listing for the log table, and a raw payload view meant to be opened
in its own tab.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..webhooks import DeliveryLog, NotFoundError
from ..webhooks.viewer import log_rows, pretty_payload
from .deps import get_delivery_log

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
async def list_logs(
    form_id: Optional[str] = None,
    delivery_log: DeliveryLog = Depends(get_delivery_log),
) -> Dict[str, Any]:
    """
    List delivery log entries, oldest first.

    Args:
        form_id: Only show entries for this form

    Returns:
        Table rows (without payloads) and count
    """
    rows = log_rows(delivery_log, form_id=form_id)
    return {"logs": rows, "count": len(rows)}


@router.get("/{log_id}")
async def get_log(
    log_id: str,
    delivery_log: DeliveryLog = Depends(get_delivery_log),
) -> Dict[str, Any]:
    """Full log entry including the raw payload string."""
    try:
        entry = delivery_log.require(log_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return entry.to_dict()


@router.get("/{log_id}/payload")
async def view_payload(
    log_id: str,
    delivery_log: DeliveryLog = Depends(get_delivery_log),
) -> Response:
    """The sent payload, pretty-printed as application/json."""
    try:
        entry = delivery_log.require(log_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=pretty_payload(entry), media_type="application/json")
