"""Tests for the httpx-backed transport."""

from __future__ import annotations

import httpx
import pytest

from apiwire.client import HTTPXTransport
from apiwire.exceptions import TransportError
from apiwire.models import RequestConfig
from apiwire.wire import WireRequest


def _wire(**kwargs: object) -> WireRequest:
    return WireRequest(method="POST", url=httpx.URL("https://api.example.com/items"), **kwargs)  # type: ignore[arg-type]


class TestHTTPXTransport:
    @pytest.mark.asyncio
    async def test_sends_method_url_headers_and_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"ok": True})

        transport = HTTPXTransport(transport=httpx.MockTransport(handler))
        wire = _wire(headers=httpx.Headers({"X-Trace": "t1"}), content=b'{"name": "a"}')
        response = await transport.send(wire)
        await transport.aclose()

        assert response.status_code == 201
        assert response.json() == {"ok": True}
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://api.example.com/items"
        assert seen[0].headers["x-trace"] == "t1"
        assert seen[0].content == b'{"name": "a"}'

    @pytest.mark.asyncio
    async def test_error_statuses_returned_not_raised(self) -> None:
        transport = HTTPXTransport(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        response = await transport.send(_wire())
        await transport.aclose()

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_redirects_not_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(301, headers={"Location": "https://api.example.com/moved"})

        transport = HTTPXTransport(transport=httpx.MockTransport(handler))
        response = await transport.send(_wire())
        await transport.aclose()

        assert response.status_code == 301

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        transport = HTTPXTransport(RequestConfig(timeout=1), transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="POST https://api.example.com/items failed") as exc_info:
            await transport.send(_wire())
        await transport.aclose()

        assert isinstance(exc_info.value.original, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_external_client_left_open(self) -> None:
        external = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
        transport = HTTPXTransport(client=external)
        await transport.send(_wire())
        await transport.aclose()

        assert not external.is_closed
        await external.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        transport = HTTPXTransport(RequestConfig(timeout=5, verify_ssl=False))
        await transport.aclose()

        assert transport._client.is_closed
