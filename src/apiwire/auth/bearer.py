"""Bearer token authenticator.

This module provides :class:`BearerTokenAuthenticator`, which injects an
``Authorization: Bearer <token>`` header. The token is either passed
directly or resolved from a credential source (``env:MY_TOKEN``,
``file:~/.token``) via :func:`~apiwire.config.resolve_credential`.

Refreshing re-reads the source, which picks up a token rotated by an
external process. A token passed directly cannot be refreshed.
"""

from __future__ import annotations

from typing import Optional

import httpx

from apiwire.auth.base import Authenticator
from apiwire.config import resolve_credential
from apiwire.exceptions import AuthorizationError, ConfigError
from apiwire.output import get_output
from apiwire.wire import WireRequest


class BearerTokenAuthenticator(Authenticator):
    """Authenticate via a token in the ``Authorization`` header.

    Args:
        token: A literal token. Mutually exclusive with *source*.
        source: A credential source descriptor resolved lazily on first use.
        header: Header name to set.
        scheme: Prefix placed before the token. Pass ``""`` for a bare token.

    Example::

        auth = BearerTokenAuthenticator(source="env:API_TOKEN")
        client.set_authenticator(auth)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        source: Optional[str] = None,
        header: str = "Authorization",
        scheme: str = "Bearer",
    ) -> None:
        if (token is None) == (source is None):
            raise ValueError("Pass exactly one of 'token' or 'source'")
        self._token = token
        self._source = source
        self._header = header
        self._scheme = scheme

    def apply_authorization(self, request: WireRequest) -> None:
        if self._token is None:
            self._token = self._resolve()
        value = f"{self._scheme} {self._token}" if self._scheme else self._token
        request.headers[self._header] = value

    async def refresh_authorization(self, response: httpx.Response) -> None:
        if self._source is None:
            raise AuthorizationError("A static bearer token cannot be refreshed")
        get_output().debug(f"Re-reading bearer token from {self._source}")
        self._token = self._resolve()

    def _resolve(self) -> str:
        assert self._source is not None
        try:
            return resolve_credential(self._source)
        except ConfigError as exc:
            raise AuthorizationError(f"Cannot resolve bearer token: {exc}") from exc
