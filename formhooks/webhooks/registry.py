# formhooks/webhooks/registry.py
"""
Webhook registry - which URLs receive which form's submissions.

The whole table is saved at once, the way a settings form resubmits
every row. A save with any invalid row is rejected and the previous
table stays in place. Duplicate rows are allowed and each one fires.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union
from urllib.parse import urlparse

from ..logging import get_logger
from .models import FieldError, FormhooksError, WebhookMapping
from .store import MemoryOptionStore, OptionStore, WEBHOOKS_OPTION

logger = get_logger(__name__)

ALLOWED_SCHEMES = ("http", "https")


class ValidationError(FormhooksError):
    """Raised when replace() is given one or more invalid mappings."""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        summary = "; ".join(f"[{e.index}] {e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid webhook mappings: {summary}")


def validate_webhook_url(url: Any) -> Optional[str]:
    """
    Check that url is a syntactically valid http(s) URL.

    Returns:
        None if valid, otherwise a message describing the problem
    """
    if not isinstance(url, str) or not url.strip():
        return "URL is required"

    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
        # Accessing .port validates the port number
        parsed.port
    except ValueError as e:
        return f"Invalid URL: {e}"

    if parsed.scheme not in ALLOWED_SCHEMES:
        return f"Invalid URL scheme: {parsed.scheme or '(none)'}. Only http/https allowed."
    if not hostname:
        return "Invalid URL: no hostname"
    return None


def _validate_form_id(form_id: Any) -> Optional[str]:
    if form_id is None or isinstance(form_id, bool):
        return "Form ID is required"
    if isinstance(form_id, int):
        return None
    if not isinstance(form_id, str) or not form_id.strip():
        return "Form ID is required"
    return None


MappingInput = Union[WebhookMapping, Mapping[str, Any]]


class WebhookRegistry:
    """
    Stores the form → webhook URL table.

    Backed by an OptionStore; the table is one value so a replace is
    seen by readers all at once.
    """

    def __init__(self, store: Optional[OptionStore] = None):
        self.store = store or MemoryOptionStore()

    def list(self) -> List[WebhookMapping]:
        """All mappings, in saved order."""
        rows = self.store.get(WEBHOOKS_OPTION, [])
        return [WebhookMapping.from_dict(row) for row in rows]

    def for_form(self, form_id: Any) -> List[WebhookMapping]:
        """Mappings that fire for form_id."""
        return [m for m in self.list() if m.matches(form_id)]

    def replace(self, new_mappings: Iterable[MappingInput]) -> List[WebhookMapping]:
        """
        Overwrite the whole table.

        Args:
            new_mappings: Complete new table (WebhookMapping or dicts with
                form_id / webhook_url)

        Returns:
            The stored mappings

        Raises:
            ValidationError: If any mapping is invalid; nothing is written
        """
        mappings: List[WebhookMapping] = []
        errors: List[FieldError] = []

        for index, item in enumerate(new_mappings):
            if isinstance(item, WebhookMapping):
                form_id, url = item.form_id, item.webhook_url
            elif isinstance(item, Mapping):
                form_id, url = item.get("form_id"), item.get("webhook_url")
            else:
                errors.append(FieldError(index, "mapping", "Expected an object with form_id and webhook_url"))
                continue

            form_id_error = _validate_form_id(form_id)
            if form_id_error:
                errors.append(FieldError(index, "form_id", form_id_error))

            url_error = validate_webhook_url(url)
            if url_error:
                errors.append(FieldError(index, "webhook_url", url_error))

            if not form_id_error and not url_error:
                if isinstance(form_id, str):
                    form_id = form_id.strip()
                mappings.append(WebhookMapping(form_id=form_id, webhook_url=url.strip()))

        if errors:
            logger.warning(
                "webhook_mappings_rejected",
                error_count=len(errors),
                errors=[e.to_dict() for e in errors],
            )
            raise ValidationError(errors)

        self.store.set(WEBHOOKS_OPTION, [m.to_dict() for m in mappings])

        logger.info("webhook_mappings_replaced", mapping_count=len(mappings))
        return mappings
