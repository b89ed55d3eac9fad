# formhooks/webhooks/viewer.py
"""Read-side helpers for showing the delivery log."""

import json
from typing import Any, Dict, List, Optional

from .delivery_log import DeliveryLog
from .models import DeliveryLogEntry, normalize_form_id


def log_rows(delivery_log: DeliveryLog, form_id: Optional[Any] = None) -> List[Dict[str, Any]]:
    """
    Table rows for the log listing, oldest first.

    Args:
        delivery_log: Log to read
        form_id: Only include entries for this form when given
    """
    entries = delivery_log.list()
    if form_id is not None:
        wanted = normalize_form_id(form_id)
        entries = [e for e in entries if normalize_form_id(e.form_id) == wanted]

    return [
        {
            "id": e.id,
            "timestamp": e.timestamp.isoformat(),
            "form_id": e.form_id,
            "status_code": e.status_code,
        }
        for e in entries
    ]


def pretty_payload(entry: DeliveryLogEntry) -> str:
    """
    The entry's payload re-encoded with 4-space indentation.

    A payload that is not valid JSON is returned as a JSON string.
    """
    try:
        decoded = json.loads(entry.payload_json)
    except ValueError:
        decoded = entry.payload_json
    return json.dumps(decoded, indent=4, ensure_ascii=False)
