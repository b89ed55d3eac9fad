# formhooks/api/deps.py
"""Request dependencies - components live on app.state (see main.create_app)."""

from fastapi import Request

from ..webhooks import DeliveryLog, WebhookDispatcher, WebhookRegistry


def get_registry(request: Request) -> WebhookRegistry:
    return request.app.state.registry


def get_delivery_log(request: Request) -> DeliveryLog:
    return request.app.state.delivery_log


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher
