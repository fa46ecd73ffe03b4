"""Transports -- the collaborator that physically sends a wire request.

:class:`Transport` is the contract the client depends on. It returns the
raw :class:`httpx.Response` whatever its status; classifying the status is
the client's job. Connectivity failures must surface as
:class:`~apiwire.exceptions.TransportError`.

:class:`HTTPXTransport` is the default implementation on top of
:class:`httpx.AsyncClient`. It does not follow redirects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from apiwire.exceptions import TransportError
from apiwire.models import RequestConfig
from apiwire.wire import WireRequest


class Transport(ABC):
    """Sends a fully built request and returns the raw response."""

    @abstractmethod
    async def send(self, request: WireRequest) -> httpx.Response:
        """Send *request* and return the response with its body read.

        Raises:
            TransportError: On connectivity, DNS, TLS or timeout failures.
        """
        ...

    async def aclose(self) -> None:
        """Release any resources held by the transport."""


class HTTPXTransport(Transport):
    """Transport backed by :class:`httpx.AsyncClient`.

    Args:
        config: Timeout and TLS settings. Ignored when *client* is given.
        client: An existing client to send through. The transport does not
            close a client it did not create.
        transport: A low-level httpx transport (e.g.
            :class:`httpx.MockTransport`) for the client the transport
            creates.

    Example::

        transport = HTTPXTransport(RequestConfig(timeout=5))
        client = Client("https://api.example.com", transport)
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=False,
            transport=transport,
        )

    async def send(self, request: WireRequest) -> httpx.Response:
        try:
            return await self._client.send(request.to_httpx())
        except httpx.TransportError as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc}", exc) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
