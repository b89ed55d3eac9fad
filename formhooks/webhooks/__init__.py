# formhooks/webhooks/__init__.py
"""
Webhook dispatch and delivery log.

Forwards form submissions to their mapped webhook URLs via HTTP POST
and records every attempt.
"""

from .delivery_log import DeliveryLog, NotFoundError
from .dispatcher import DeliveryError, WebhookDispatcher
from .models import (
    ERROR_STATUS,
    DeliveryLogEntry,
    DeliveryResult,
    FieldError,
    FormhooksError,
    WebhookMapping,
)
from .registry import ValidationError, WebhookRegistry
from .store import JsonFileOptionStore, MemoryOptionStore, OptionStore, create_option_store

__all__ = [
    "ERROR_STATUS",
    "DeliveryError",
    "DeliveryLog",
    "DeliveryLogEntry",
    "DeliveryResult",
    "FieldError",
    "FormhooksError",
    "JsonFileOptionStore",
    "MemoryOptionStore",
    "NotFoundError",
    "OptionStore",
    "ValidationError",
    "WebhookDispatcher",
    "WebhookMapping",
    "WebhookRegistry",
    "create_option_store",
]
