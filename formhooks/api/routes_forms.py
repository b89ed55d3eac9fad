# formhooks/api/routes_forms.py
"""
Form routes.

POST /forms/{form_id}/submissions is what the host form system calls
after a submission succeeds. Field contents are forwarded untouched.
"""

from collections import Counter
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..logging import get_logger
from ..webhooks import WebhookDispatcher, WebhookRegistry
from ..webhooks.models import normalize_form_id
from .deps import get_dispatcher, get_registry

router = APIRouter(prefix="/forms", tags=["forms"])

logger = get_logger(__name__)


@router.get("")
async def list_forms(registry: WebhookRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Forms that have at least one webhook, with mapping counts."""
    counts = Counter(normalize_form_id(m.form_id) for m in registry.list())
    return {
        "forms": [
            {"form_id": form_id, "webhook_count": count}
            for form_id, count in counts.items()
        ],
        "count": len(counts),
    }


@router.post("/{form_id}/submissions")
def submit_form(
    form_id: str,
    fields: Dict[str, Any] = Body(...),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> Dict[str, Any]:
    """
    Forward a submission to every webhook mapped to the form.

    Runs in the threadpool since delivery blocks on the network.

    Args:
        form_id: Submitted form
        fields: Submitted field name → value

    Returns:
        One delivery record per matching webhook
    """
    results = dispatcher.dispatch(normalize_form_id(form_id), fields)

    failed = sum(1 for r in results if not r.success)
    if failed:
        logger.warning(
            "submission_partially_delivered",
            form_id=form_id,
            failed=failed,
            total=len(results),
        )

    return {
        "form_id": normalize_form_id(form_id),
        "deliveries": [r.to_dict() for r in results],
        "count": len(results),
    }
