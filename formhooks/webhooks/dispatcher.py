# formhooks/webhooks/dispatcher.py
"""
Webhook dispatcher - forwards a form submission to every mapped URL.

One submission, one JSON body: the payload is serialized once and the
same bytes go to every matching target. Each attempt is logged exactly
once, whatever happens. A target that cannot be reached is logged with
ERROR_STATUS and never stops delivery to the others. HTTP error
statuses (4xx/5xx) are recorded as-is; they are not failures here.
If the log store itself fails, the attempt is reported on the
operational log and its result carries no log entry id.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..logging import get_logger
from .delivery_log import DeliveryLog
from .models import ERROR_STATUS, DeliveryResult, FormhooksError, WebhookMapping
from .registry import WebhookRegistry
from .store import OptionStoreError

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "formhooks/0.1"


class DeliveryError(FormhooksError):
    """Raised when a request could not be completed (no HTTP response)."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Delivery to {url} failed: {message}")


def serialize_payload(payload: Mapping[str, Any]) -> str:
    """Compact JSON, field order preserved."""
    return json.dumps(dict(payload), separators=(",", ":"), default=str)


class WebhookDispatcher:
    """
    Delivers form submissions to registered webhooks.

    Sequential by default. With max_workers > 1 the targets of one
    submission are posted in parallel; results still come back in
    registry order, but arrival order at the targets is not defined.
    """

    def __init__(
        self,
        registry: WebhookRegistry,
        delivery_log: DeliveryLog,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT,
        max_workers: int = 1,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.registry = registry
        self.delivery_log = delivery_log
        self.timeout = timeout_seconds
        self.max_workers = max(1, max_workers)
        self.user_agent = user_agent
        self.client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def dispatch(self, form_id: Any, payload: Mapping[str, Any]) -> List[DeliveryResult]:
        """
        Send a submission to every webhook mapped to form_id.

        Not idempotent: each call is a separate delivery round.

        Args:
            form_id: Submitted form's id ("7" and 7 are the same form)
            payload: Submitted field name → value

        Returns:
            One DeliveryResult per matching mapping, in registry order
        """
        body = serialize_payload(payload)
        webhooks = self.registry.for_form(form_id)

        logger.info(
            "dispatch_started",
            form_id=form_id,
            webhook_count=len(webhooks),
        )

        if not webhooks:
            return []

        if self.max_workers == 1 or len(webhooks) == 1:
            return [self._deliver(webhook, form_id, body) for webhook in webhooks]

        workers = min(self.max_workers, len(webhooks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._deliver, webhook, form_id, body)
                for webhook in webhooks
            ]
            # _deliver never raises, so result() is safe
            return [future.result() for future in futures]

    def _deliver(self, webhook: WebhookMapping, form_id: Any, body: str) -> DeliveryResult:
        """
        Post to a single target and log the attempt.

        Args:
            webhook: Target mapping
            form_id: Form id as received by dispatch()
            body: Serialized payload

        Returns:
            Delivery result
        """
        error: Optional[str] = None
        try:
            status_code = self.post(webhook.webhook_url, body)
        except DeliveryError as e:
            status_code = ERROR_STATUS
            error = str(e)
            logger.warning(
                "webhook_delivery_failed",
                form_id=form_id,
                url=webhook.webhook_url,
                error=error,
            )

        log_entry_id: Optional[str] = None
        try:
            entry = self.delivery_log.append(
                form_id=form_id,
                status_code=status_code,
                payload_json=body,
            )
            log_entry_id = entry.id
        except OptionStoreError:
            # The request already went out; report it and keep going
            logger.exception(
                "delivery_log_write_failed",
                form_id=form_id,
                url=webhook.webhook_url,
                status_code=status_code,
            )

        return DeliveryResult(
            url=webhook.webhook_url,
            status_code=status_code,
            log_entry_id=log_entry_id,
            error=error,
        )

    def post(self, url: str, body: str) -> int:
        """
        POST body to url.

        Returns:
            HTTP status code of the response, whatever it is

        Raises:
            DeliveryError: If no response was received
        """
        headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

        logger.info("webhook_delivery_attempt", url=url)

        try:
            response = self.client.post(url, content=body.encode("utf-8"), headers=headers)
        except httpx.TimeoutException as e:
            raise DeliveryError(url, f"Timeout: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DeliveryError(url, str(e) or type(e).__name__) from e
        except Exception as e:
            # httpcore leaves some socket errors unmapped (IDNA UnicodeError)
            raise DeliveryError(url, f"{type(e).__name__}: {e}") from e

        logger.info(
            "webhook_delivery_complete",
            url=url,
            status_code=response.status_code,
        )
        return response.status_code

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
