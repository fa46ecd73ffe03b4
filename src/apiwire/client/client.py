"""The client -- builds, dispatches, classifies and decodes typed requests.

:class:`Client` turns a :class:`~apiwire.request.Request` descriptor into
a :class:`~apiwire.wire.WireRequest`, sends it through a
:class:`~apiwire.client.transport.Transport`, and decodes a 2xx body into
the descriptor's ``response_type``.

Each call runs the same pipeline:

1. **Build** -- base URL + path segments, default headers, request
   headers (which win on conflicts), credentials from the authenticator
   when the request requires authorization, query parameters, and the
   encoded body (which may set ``Content-Type``).
2. **Send** -- hand the wire request to the transport.
3. **Classify** -- 2xx decodes; 401 with an authenticator refreshes and
   goes back to step 1 with the same descriptor; anything else raises
   :class:`~apiwire.exceptions.HTTPStatusError`.

Refreshes per call are capped by ``max_auth_refreshes`` (3 by default);
``None`` lifts the cap and leaves termination to the authenticator.

See Also:
    :class:`~apiwire.client.state.ClientState` for how default headers and
    the authenticator are shared safely between concurrent calls.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, TypeVar, Union
from urllib.parse import quote

import httpx

from apiwire.auth.base import Authenticator
from apiwire.client.state import ClientState
from apiwire.client.transport import HTTPXTransport, Transport
from apiwire.codec import decode_body, encode_body
from apiwire.exceptions import AuthorizationError, HTTPStatusError, RequestError, TransportError
from apiwire.models import ClientConfig, HTTPMethod
from apiwire.output import get_output
from apiwire.request import Request
from apiwire.wire import WireRequest

ResponseT = TypeVar("ResponseT")

DEFAULT_MAX_AUTH_REFRESHES = 3


class Client:
    """Routes typed requests through a single transport.

    Create one per API and reuse it; it is safe to run many
    :meth:`send` calls concurrently. Use it as an async context manager
    so the worker task and any transport it created are closed.

    Args:
        base_url: Root URL path segments are appended to.
        transport: Where requests are sent. Defaults to an
            :class:`~apiwire.client.transport.HTTPXTransport` owned by
            the client.
        default_headers: Headers applied to every request.
        authenticator: Consulted for requests that require authorization.
            Only weakly referenced; keep your own reference.
        max_auth_refreshes: Refresh-and-retry cycles allowed per call.
            ``None`` removes the ceiling.

    Example::

        async with Client("https://api.example.com/v1") as client:
            client.set_authenticator(auth)
            user = await client.send(GetUser("42"))
    """

    def __init__(
        self,
        base_url: Union[str, httpx.URL],
        transport: Optional[Transport] = None,
        *,
        default_headers: Optional[Mapping[str, str]] = None,
        authenticator: Optional[Authenticator] = None,
        max_auth_refreshes: Optional[int] = DEFAULT_MAX_AUTH_REFRESHES,
    ) -> None:
        self._base_url = httpx.URL(base_url)
        self._owns_transport = transport is None
        self._transport = transport or HTTPXTransport()
        self._state = ClientState(default_headers, authenticator)
        self._max_auth_refreshes = max_auth_refreshes

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> Client:
        """Create a client from a resolved :class:`~apiwire.models.ClientConfig`."""
        client = cls(
            config.base_url,
            transport or HTTPXTransport(config.request),
            default_headers=config.headers,
            authenticator=authenticator,
            max_auth_refreshes=config.max_auth_refreshes,
        )
        client._owns_transport = transport is None
        return client

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def state(self) -> ClientState:
        """The serialized store behind default headers and the authenticator."""
        return self._state

    # ------------------------------------------------------------------ #
    # Shared state mutation
    # ------------------------------------------------------------------ #

    def set_authenticator(self, authenticator: Optional[Authenticator]) -> None:
        """Attach *authenticator* (weakly), or detach with ``None``.

        Takes effect for every call built after this one returns; calls
        already being built may or may not see it.
        """
        self._state.set_authenticator(authenticator)

    def set_header(self, name: str, value: Optional[str]) -> None:
        """Set default header *name*, or remove it when *value* is ``None``."""
        if value is None:
            self._state.remove_header(name)
        else:
            self._state.set_header(name, value)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the state worker and close the transport if the client created it."""
        await self._state.aclose()
        if self._owns_transport:
            await self._transport.aclose()

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    async def send(self, request: Request[ResponseT]) -> ResponseT:
        """Send *request* and decode the response into ``request.response_type``.

        Args:
            request: The descriptor of the call.

        Returns:
            The decoded response.

        Raises:
            AuthorizationError: If the authenticator fails to attach credentials.
            HTTPStatusError: On a non-2xx response that was not recovered.
            CodecError: If the body cannot be encoded or the response decoded.
            TransportError: If the transport fails to complete the round trip.
        """
        output = get_output()
        refreshes = 0

        while True:
            wire, authenticator = await self._build(request)

            output.debug(f"-> {wire.method} {wire.url}")
            response = await self._dispatch(wire)
            status = response.status_code
            output.debug(f"<- {status} {wire.method} {wire.url}")

            if 200 <= status < 300:
                return decode_body(request.response_type, response.content, response)

            if status == 401 and authenticator is not None:
                if self._max_auth_refreshes is not None and refreshes >= self._max_auth_refreshes:
                    output.warning(
                        f"Giving up on {request.describe()} after {refreshes} credential "
                        f"refresh(es) still answered 401"
                    )
                    raise self._status_error(response)
                refreshes += 1
                await self._refresh(authenticator, response)
                continue

            raise self._status_error(response)

    async def _build(self, request: Request[ResponseT]) -> tuple[WireRequest, Optional[Authenticator]]:
        """Assemble the wire request; also return the authenticator consulted, if any."""
        try:
            method = HTTPMethod(request.method).value
        except ValueError as exc:
            raise RequestError(f"Unsupported HTTP method {request.method!r} for {request.describe()}") from exc

        state = await self._state.snapshot()

        wire = WireRequest(
            method=method,
            url=self._url_for(request.path),
        )

        for name, value in state.headers.items():
            wire.headers[name] = value
        for name, value in request.headers.items():
            wire.headers[name] = value

        authenticator = state.authenticator if request.requires_authorization else None
        if authenticator is not None:
            self._authorize(authenticator, wire)

        request.params.add_to(wire)
        encode_body(request.body, wire)
        return wire, authenticator

    def _url_for(self, path: Sequence[str]) -> httpx.URL:
        segments = [quote(segment.strip("/"), safe="/") for segment in path]
        joined = "/".join(segment for segment in segments if segment)
        base_path = self._base_url.path.rstrip("/")
        return self._base_url.copy_with(path=f"{base_path}/{joined}" if joined else base_path or "/")

    @staticmethod
    def _authorize(authenticator: Authenticator, wire: WireRequest) -> None:
        try:
            authenticator.apply_authorization(wire)
        except AuthorizationError:
            raise
        except Exception as exc:
            raise AuthorizationError(f"Cannot attach credentials: {exc}") from exc

    async def _dispatch(self, wire: WireRequest) -> httpx.Response:
        try:
            return await self._transport.send(wire)
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(f"{wire.method} {wire.url} failed: {exc}", exc) from exc

    async def _refresh(self, authenticator: Authenticator, response: httpx.Response) -> None:
        output = get_output()
        output.debug("401 received; refreshing credentials")
        try:
            await authenticator.refresh_authorization(response)
        except Exception as exc:
            output.debug(f"Credential refresh failed: {exc}")
            raise self._status_error(response) from exc

    @staticmethod
    def _status_error(response: httpx.Response) -> HTTPStatusError:
        try:
            body: Optional[str] = response.content.decode("utf-8")
        except UnicodeDecodeError:
            body = None
        return HTTPStatusError(response.status_code, body, response)
