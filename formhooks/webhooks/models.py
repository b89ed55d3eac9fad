# formhooks/webhooks/models.py
"""
Webhook domain models.

A WebhookMapping routes submissions of one form to one URL. Several
mappings may share a form id (fan-out), and duplicates are kept as-is.
Each delivery attempt produces exactly one DeliveryLogEntry.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

# Status recorded when the request itself failed (DNS, refused, timeout)
ERROR_STATUS = "error"

StatusCode = Union[int, str]
FormId = Union[int, str]

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+\Z")


class FormhooksError(Exception):
    """Base exception for formhooks errors."""
    pass


def normalize_form_id(form_id: Any) -> FormId:
    """
    Normalize a form identifier for comparison.

    Integer-like values ("7", " 7 ", 7) become ints; anything else is
    compared as a stripped string.
    """
    if isinstance(form_id, bool):
        return str(form_id)
    if isinstance(form_id, int):
        return form_id
    text = str(form_id).strip()
    # Plain ASCII digits only; "1_0" or "²" stay strings
    if _INT_PATTERN.match(text):
        return int(text)
    return text


@dataclass(frozen=True)
class WebhookMapping:
    """One form id → webhook URL row."""
    form_id: FormId
    webhook_url: str

    def matches(self, form_id: Any) -> bool:
        return normalize_form_id(self.form_id) == normalize_form_id(form_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"form_id": self.form_id, "webhook_url": self.webhook_url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebhookMapping":
        return cls(form_id=data.get("form_id"), webhook_url=data.get("webhook_url"))


@dataclass(frozen=True)
class DeliveryLogEntry:
    """Record of a single delivery attempt. Never mutated."""
    id: str
    timestamp: datetime
    form_id: FormId
    status_code: StatusCode
    payload_json: str

    @property
    def failed(self) -> bool:
        return self.status_code == ERROR_STATUS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "form_id": self.form_id,
            "status_code": self.status_code,
            "payload_json": self.payload_json,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeliveryLogEntry":
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            form_id=data["form_id"],
            status_code=data["status_code"],
            payload_json=data["payload_json"],
        )


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt, as returned by dispatch()."""
    url: str
    status_code: StatusCode
    log_entry_id: Optional[str]
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """True when the target answered at all, whatever the status."""
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status_code": self.status_code,
            "error": self.error,
            "log_entry_id": self.log_entry_id,
        }


@dataclass(frozen=True)
class FieldError:
    """Why one mapping in a replace() call was rejected."""
    index: int
    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "field": self.field, "message": self.message}
