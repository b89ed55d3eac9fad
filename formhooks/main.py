# formhooks/main.py
"""
formhooks - Main Application

Maps form ids to webhook URLs, forwards each submission to its mapped
URLs and keeps a log of every delivery attempt.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .api import forms_router, logs_router, webhooks_router
from .logging import get_logger
from .settings import Settings, settings as default_settings
from .webhooks import (
    DeliveryLog,
    WebhookDispatcher,
    WebhookRegistry,
    create_option_store,
)

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Server"] = "formhooks"
        return response


def create_app(
    config: Optional[Settings] = None,
    registry: Optional[WebhookRegistry] = None,
    delivery_log: Optional[DeliveryLog] = None,
    dispatcher: Optional[WebhookDispatcher] = None,
) -> FastAPI:
    """
    Build the application.

    Components not passed in are built from config; registry and log
    share one option store.
    """
    config = config or default_settings

    if registry is None or delivery_log is None:
        store = create_option_store(config.options_dir)
        registry = registry or WebhookRegistry(store)
        delivery_log = delivery_log or DeliveryLog(store)

    if dispatcher is None:
        dispatcher = WebhookDispatcher(
            registry,
            delivery_log,
            timeout_seconds=config.webhook_timeout_seconds,
            max_workers=config.webhook_max_workers,
            user_agent=config.webhook_user_agent,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "service_starting",
            options_dir=config.options_dir,
            max_workers=dispatcher.max_workers,
        )
        yield
        dispatcher.close()
        logger.info("service_stopped")

    app = FastAPI(
        title="formhooks",
        description="""
        Forward form submissions to webhooks.

        - Map form ids to one or more webhook URLs (duplicates all fire)
        - POST each submission as JSON to every mapped URL
        - Log every attempt with its HTTP status and the exact payload sent
        """,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.registry = registry
    app.state.delivery_log = delivery_log
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(webhooks_router)
    app.include_router(forms_router)
    app.include_router(logs_router)

    @app.get("/health")
    async def health_check():
        """Basic health check."""
        return {"status": "ok", "service": "formhooks"}

    return app


app = create_app()


def run():
    """Run the server (entry point for CLI)."""
    import uvicorn
    uvicorn.run(
        "formhooks.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
    )


if __name__ == "__main__":
    run()
