"""Shared test fixtures for apiwire.

Provides a scripted transport that replays canned responses and records
every wire request it receives, a recording authenticator, and the
autouse reset of the global output manager.
"""

from __future__ import annotations

from typing import Any, Callable, Union

import httpx
import pytest

from apiwire.auth.base import Authenticator
from apiwire.client.transport import Transport
from apiwire.output import OutputManager, reset_output, set_output
from apiwire.wire import WireRequest

Scripted = Union[httpx.Response, BaseException, Callable[[WireRequest], httpx.Response]]


class ScriptedTransport(Transport):
    """Returns queued responses in order and records what was sent."""

    def __init__(self, *responses: Scripted) -> None:
        self.responses: list[Scripted] = list(responses)
        self.requests: list[WireRequest] = []
        self.closed = False

    async def send(self, request: WireRequest) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        response = item(request) if callable(item) else item
        response.request = request.to_httpx()
        return response

    async def aclose(self) -> None:
        self.closed = True


class RecordingAuthenticator(Authenticator):
    """Attaches ``Bearer token-<n>`` and bumps ``n`` on every refresh."""

    def __init__(self, refresh_error: Exception | None = None, apply_error: Exception | None = None) -> None:
        self.generation = 0
        self.applied: list[WireRequest] = []
        self.refreshed: list[httpx.Response] = []
        self.refresh_error = refresh_error
        self.apply_error = apply_error

    def apply_authorization(self, request: WireRequest) -> None:
        if self.apply_error is not None:
            raise self.apply_error
        self.applied.append(request)
        request.headers["Authorization"] = f"Bearer token-{self.generation}"

    async def refresh_authorization(self, response: httpx.Response) -> None:
        self.refreshed.append(response)
        if self.refresh_error is not None:
            raise self.refresh_error
        self.generation += 1


@pytest.fixture(autouse=True)
def _plain_output() -> Any:
    """Install a colourless, non-verbose output manager and reset it afterwards."""
    set_output(OutputManager(no_color=True))
    yield
    reset_output()


@pytest.fixture
def make_transport() -> Callable[..., ScriptedTransport]:
    """Factory for :class:`ScriptedTransport` instances."""
    return ScriptedTransport


@pytest.fixture
def authenticator() -> RecordingAuthenticator:
    return RecordingAuthenticator()


@pytest.fixture
def make_authenticator() -> Callable[..., RecordingAuthenticator]:
    return RecordingAuthenticator
