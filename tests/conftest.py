# tests/conftest.py
"""
Pytest configuration and fixtures.

Webhook targets are faked with httpx.MockTransport, so no test touches
the network. Each test gets fresh stores.
"""

import threading
from typing import Dict, List, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from formhooks.main import create_app
from formhooks.settings import Settings
from formhooks.webhooks import (
    DeliveryLog,
    MemoryOptionStore,
    WebhookDispatcher,
    WebhookRegistry,
)


class FakeTargets:
    """
    Records every request and answers per URL.

    responses maps a URL to a status code, an httpx exception class
    (raised with the request attached) or an exception instance to
    raise as-is. Unknown URLs get 200.
    """

    def __init__(self):
        self.responses: Dict[str, Union[int, type, Exception]] = {}
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()

    def respond(self, url: str, outcome: Union[int, type, Exception]):
        self.responses[url] = outcome

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        outcome = self.responses.get(str(request.url), 200)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, type):
            raise outcome("simulated failure", request=request)
        return httpx.Response(outcome, json={"ok": outcome < 400})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def bodies_for(self, url: str) -> List[bytes]:
        return [r.content for r in self.requests if str(r.url) == url]


@pytest.fixture
def store() -> MemoryOptionStore:
    return MemoryOptionStore()


@pytest.fixture
def registry(store) -> WebhookRegistry:
    return WebhookRegistry(store)


@pytest.fixture
def delivery_log(store) -> DeliveryLog:
    return DeliveryLog(store)


@pytest.fixture
def targets() -> FakeTargets:
    return FakeTargets()


@pytest.fixture
def dispatcher(registry, delivery_log, targets):
    with WebhookDispatcher(registry, delivery_log, transport=targets.transport()) as d:
        yield d


@pytest.fixture
def client(registry, delivery_log, dispatcher):
    """API client wired to the same registry, log and fake targets."""
    app = create_app(
        config=Settings(),
        registry=registry,
        delivery_log=delivery_log,
        dispatcher=dispatcher,
    )
    with TestClient(app) as test_client:
        yield test_client
