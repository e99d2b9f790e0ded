"""Pytest fixtures for courseware tests."""

import re
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

from courseware.context import CoursewareContext
from courseware.http_client import LmsClient

from .factories import LMS_BASE_URL


class FakeLms:
    """Scripted LMS for httpx.MockTransport.

    Routes are (method, path regex) pairs answered with a JSON body or a
    network error. Every request is recorded in history. Unrouted requests
    get a 404.
    """

    def __init__(self):
        self.routes: list[tuple[str, re.Pattern, int, object, bool]] = []
        self.history: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: object = None,
        network_error: bool = False,
    ) -> None:
        # Later routes take precedence, so tests can override earlier ones
        pattern = re.compile(re.escape(path) + r"/?")
        self.routes.insert(0, (method, pattern, status, json, network_error))

    def requests(self, method: str) -> list[httpx.Request]:
        return [r for r in self.history if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.history.append(request)
        for method, pattern, status, body, network_error in self.routes:
            if method == request.method and pattern.fullmatch(request.url.path):
                if network_error:
                    raise httpx.ConnectError("Network Error", request=request)
                return httpx.Response(status, json=body)
        return httpx.Response(404, json={"detail": "Not found"})


@pytest.fixture
def fake_lms() -> FakeLms:
    return FakeLms()


@pytest.fixture
def log_error() -> MagicMock:
    return MagicMock()


@pytest_asyncio.fixture
async def ctx(fake_lms, log_error, monkeypatch):
    """A context wired to the fake LMS, with a mock error reporter."""
    monkeypatch.delenv("LMS_USERNAME", raising=False)
    client = LmsClient(
        base_url=LMS_BASE_URL,
        access_token="test-token",
        transport=httpx.MockTransport(fake_lms.handler),
    )
    context = CoursewareContext(client=client, log_error=log_error)
    yield context
    await context.aclose()
