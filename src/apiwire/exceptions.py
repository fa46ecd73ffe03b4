"""Exception hierarchy for apiwire.

All exceptions inherit from :class:`ApiwireError`, so callers can catch
every failure the library produces with a single ``except`` clause while
still branching on the concrete type when they need to.

Subclass hierarchy::

    ApiwireError
    +-- AuthorizationError   (attaching or obtaining credentials failed)
    +-- HTTPStatusError      (non-2xx response that was not recovered)
    +-- CodecError           (request/response body encoding or decoding)
    +-- TransportError       (connectivity, DNS, TLS -- from the transport)
    +-- ConfigError          (invalid configuration or credential source)
    +-- RequestError         (malformed request descriptor)

Only the 401 -> refresh -> retry path is ever retried; every other error
surfaces to the caller of :meth:`~apiwire.client.Client.send` unchanged.
"""

from __future__ import annotations

from typing import Optional

import httpx


class ApiwireError(Exception):
    """Base exception for all apiwire errors."""


class AuthorizationError(ApiwireError):
    """Raised when credentials cannot be attached to, or obtained for, a request."""


class HTTPStatusError(ApiwireError):
    """Raised for a non-2xx response that the client could not recover from.

    This covers every non-2xx status except a 401 that was successfully
    refreshed and retried: a 401 with no authenticator attached, a 401
    whose refresh failed, and a 401 after the refresh budget ran out all
    surface here.

    Args:
        status_code: The HTTP status code of the response.
        body: The response body decoded as UTF-8, or ``None`` when the
            body is not valid UTF-8.
        response: The originating :class:`httpx.Response` (URL, headers).

    Example::

        try:
            await client.send(GetUser("42"))
        except HTTPStatusError as exc:
            if exc.status_code == 404:
                ...
    """

    def __init__(
        self,
        status_code: int,
        body: Optional[str],
        response: httpx.Response,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.response = response
        super().__init__(f"HTTP Status Code: {status_code}")

    @property
    def url(self) -> Optional[str]:
        """The URL of the request that produced this response, if known."""
        try:
            return str(self.response.url)
        except RuntimeError:
            # httpx raises when the response was built without a request.
            return None

    @property
    def failure_reason(self) -> str:
        """The response URL (or ``N/A``) on the first line, followed by the body text."""
        result = f"{self.url or 'N/A'}\n"
        if self.body is not None:
            result += self.body
        return result


class CodecError(ApiwireError):
    """Raised when encoding a request body or decoding a response body fails."""


class TransportError(ApiwireError):
    """Raised when the transport could not complete the round trip.

    The transport's own exception is chained as ``__cause__`` and kept on
    :attr:`original` so callers can inspect it without unwrapping.
    """

    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original = original


class ConfigError(ApiwireError):
    """Raised for configuration problems (invalid JSON, bad env values, unknown credential sources)."""


class RequestError(ApiwireError):
    """Raised when a request descriptor cannot be turned into a wire request, e.g. an unknown method."""
