"""Pluggable authentication for apiwire clients.

- :class:`Authenticator` -- abstract base class: attach credentials and
  refresh them after a 401.
- :class:`BearerTokenAuthenticator` -- static or source-backed bearer token.
- :class:`ClientCredentialsAuthenticator` -- OAuth2 client-credentials grant.

Typical usage::

    from apiwire.auth import BearerTokenAuthenticator

    auth = BearerTokenAuthenticator(source="env:API_TOKEN")
    client.set_authenticator(auth)   # the client keeps only a weak reference
"""

from apiwire.auth.base import Authenticator
from apiwire.auth.bearer import BearerTokenAuthenticator
from apiwire.auth.oauth2 import ClientCredentialsAuthenticator

__all__ = [
    "Authenticator",
    "BearerTokenAuthenticator",
    "ClientCredentialsAuthenticator",
]
