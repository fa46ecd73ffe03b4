"""The mutable wire request assembled by the client before dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx


@dataclass
class WireRequest:
    """A concrete HTTP request under construction.

    The client creates one per attempt, then headers, authenticators,
    query parameters and body codecs mutate it in turn. Transports turn
    it into an :class:`httpx.Request` with :meth:`to_httpx`.

    Attributes:
        method: HTTP method name, e.g. ``"GET"``.
        url: The target URL including any query string.
        headers: Case-insensitive request headers.
        content: Serialized body bytes, or ``None`` for no body.
    """

    method: str
    url: httpx.URL
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: Optional[bytes] = None

    def to_httpx(self) -> httpx.Request:
        """Build the :class:`httpx.Request` a transport sends."""
        return httpx.Request(
            self.method,
            self.url,
            headers=self.headers,
            content=self.content,
        )
