"""Shared fixtures for Convolut MCP server tests."""

from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from convolut_mcp.mcp_server.client import ConvolutClient
from convolut_mcp.mcp_server.config import Config
from convolut_mcp.mcp_server.tools import ConvolutTools

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class RecordingApi:
    """httpx mock handler that records requests and replays queued responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._queued: list[Callable[[httpx.Request], httpx.Response]] = []
        self._default: Callable[[httpx.Request], httpx.Response] | None = None

    def reply(self, status: int = 200, **kwargs) -> "RecordingApi":
        """Queue one response (kwargs go to httpx.Response)."""
        self._queued.append(lambda request: httpx.Response(status, **kwargs))
        return self

    def raise_error(self, error_cls: type[Exception], message: str) -> "RecordingApi":
        def _raise(request):
            raise error_cls(message, request=request)

        self._queued.append(_raise)
        return self

    def always(self, status: int = 200, **kwargs) -> "RecordingApi":
        """Answer every unqueued request with this response."""
        self._default = lambda request: httpx.Response(status, **kwargs)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queued:
            return self._queued.pop(0)(request)
        if self._default is not None:
            return self._default(request)
        raise AssertionError(f"Unexpected request: {request.method} {request.url}")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_context(context_id: str, **overrides: Any) -> dict[str, Any]:
    """A context as the API returns it."""
    context = {
        "id": context_id,
        "title": f"Context {context_id}",
        "content": f"Content for {context_id}",
        "tags": [],
        "category": "other",
        "is_favorite": False,
        "word_count": 10,
        "created_date": "2025-06-10T09:30:00Z",
        "updated_date": "2025-06-10T09:30:00Z",
        "created_by": "user-1",
        "files": [],
    }
    context.update(overrides)
    return context


@pytest.fixture
def config() -> Config:
    return Config(api_key="test-key", _env_file=None)


@pytest.fixture
def api() -> RecordingApi:
    return RecordingApi()


@pytest.fixture
def client(config: Config, api: RecordingApi) -> ConvolutClient:
    return ConvolutClient(config, transport=api.transport)


@pytest.fixture
def tools(client: ConvolutClient) -> ConvolutTools:
    return ConvolutTools(client, clock=lambda: FIXED_NOW)


@pytest.fixture
def context_factory() -> Callable[..., dict[str, Any]]:
    return make_context


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW
