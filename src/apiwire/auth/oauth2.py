"""OAuth2 Client Credentials authenticator.

This module provides :class:`ClientCredentialsAuthenticator`, which
performs the non-interactive Client Credentials grant (:rfc:`6749`
section 4.4), exchanging a ``client_id`` and ``client_secret`` for an
access token at ``token_url``.

Tokens are cached in memory with expiry tracking and a 30-second safety
margin. Attaching credentials never performs I/O: without a valid cached
token the request goes out unauthenticated, the server answers 401, and
the client's refresh path fetches a token and retries. Call
:meth:`~ClientCredentialsAuthenticator.fetch_token` up front to skip that
first round trip.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Sequence

import httpx

from apiwire.auth.base import Authenticator
from apiwire.config import resolve_credential
from apiwire.exceptions import AuthorizationError, ConfigError
from apiwire.output import get_output
from apiwire.wire import WireRequest

_EXPIRY_MARGIN = 30.0
_DEFAULT_LIFETIME = 3600.0


class ClientCredentialsAuthenticator(Authenticator):
    """Authenticate via OAuth2 Client Credentials grant.

    Args:
        token_url: The token endpoint.
        client_id_source: Credential source for the client id.
        client_secret_source: Credential source for the client secret.
        scopes: Scopes requested, sent space-separated.
        http_client: Client used for token requests. One is created per
            request when omitted.
    """

    def __init__(
        self,
        token_url: str,
        client_id_source: str,
        client_secret_source: str,
        scopes: Sequence[str] = (),
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._token_url = token_url
        self._client_id_source = client_id_source
        self._client_secret_source = client_secret_source
        self._scopes = list(scopes)
        self._http_client = http_client
        self._cached_token: Optional[str] = None
        self._token_expiry: float = 0.0

    @property
    def has_valid_token(self) -> bool:
        return self._cached_token is not None and time.monotonic() < (
            self._token_expiry - _EXPIRY_MARGIN
        )

    def apply_authorization(self, request: WireRequest) -> None:
        if not self.has_valid_token:
            get_output().debug("No valid client-credentials token cached; sending without one")
            return
        request.headers["Authorization"] = f"Bearer {self._cached_token}"

    async def refresh_authorization(self, response: httpx.Response) -> None:
        self._cached_token = None
        self._token_expiry = 0.0
        await self.fetch_token()

    async def fetch_token(self) -> str:
        """Fetch a new access token and cache it.

        Returns:
            The access token.

        Raises:
            AuthorizationError: If credentials cannot be resolved, the token
                request fails, or the response has no ``access_token``.
        """
        token_data = await self._request_token()
        self._cache_token(token_data)
        assert self._cached_token is not None
        return self._cached_token

    async def _request_token(self) -> dict[str, Any]:
        """POST ``grant_type=client_credentials`` to the token endpoint."""
        try:
            client_id = resolve_credential(self._client_id_source)
            client_secret = resolve_credential(self._client_secret_source)
        except ConfigError as exc:
            raise AuthorizationError(f"Cannot resolve client credentials: {exc}") from exc

        data: dict[str, str] = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        if self._scopes:
            data["scope"] = " ".join(self._scopes)

        get_output().debug(f"Requesting client-credentials token from {self._token_url}")
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, data)
            else:
                async with httpx.AsyncClient(timeout=30.0) as http_client:
                    response = await self._post(http_client, data)
            response.raise_for_status()
            token_data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthorizationError(
                f"Token request failed with status {exc.response.status_code}: "
                f"{exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthorizationError(f"Token request failed: {exc}") from exc
        except ValueError as exc:
            raise AuthorizationError(f"Token response is not valid JSON: {exc}") from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise AuthorizationError("Token response missing 'access_token' field")

        return token_data

    async def _post(self, http_client: httpx.AsyncClient, data: dict[str, str]) -> httpx.Response:
        return await http_client.post(
            self._token_url,
            data=data,
            headers={"Accept": "application/json"},
        )

    def _cache_token(self, token_data: dict[str, Any]) -> None:
        """Cache the access token and compute its expiry time."""
        self._cached_token = token_data["access_token"]
        expires_in = token_data.get("expires_in")
        if expires_in is not None:
            self._token_expiry = time.monotonic() + float(expires_in)
        else:
            self._token_expiry = time.monotonic() + _DEFAULT_LIFETIME
