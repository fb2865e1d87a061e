"""Pytest configuration for tests."""

import json
from typing import Callable, List

import httpx
import pytest

from rewriter.config import Settings
from rewriter.settings_store import SettingsStore
from rewriter.summarizer.manager import SummarizationManager


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use only asyncio backend."""
    return "asyncio"


class FakeBackend:
    """Records outbound requests and answers them with a configurable handler."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(404, text="no handler")
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def service_settings():
    return Settings(settings_path=None, llm_connect_timeout_seconds=2.0)


@pytest.fixture
def store():
    return SettingsStore(None)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
async def manager(store, service_settings, backend):
    manager = SummarizationManager(
        store, settings=service_settings, transport=backend.transport
    )
    yield manager
    await manager.aclose()
