# formhooks/api/__init__.py
"""API routes package."""

from .routes_forms import router as forms_router
from .routes_logs import router as logs_router
from .routes_webhooks import router as webhooks_router

__all__ = [
    "forms_router",
    "logs_router",
    "webhooks_router",
]
