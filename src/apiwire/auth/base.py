"""Abstract base class for authenticators.

An :class:`Authenticator` has two jobs:

1. :meth:`~Authenticator.apply_authorization` -- attach credentials to an
   outgoing :class:`~apiwire.wire.WireRequest` (usually an
   ``Authorization`` header). Called during request construction for
   every request that requires authorization.
2. :meth:`~Authenticator.refresh_authorization` -- called with the
   response that came back 401, to renew whatever credential expired.
   When it returns normally the client re-sends the same request.

The client never owns its authenticator: it keeps only a weak reference,
so an authenticator whose owner drops it simply stops being consulted.

See Also:
    :class:`~apiwire.auth.bearer.BearerTokenAuthenticator` and
    :class:`~apiwire.auth.oauth2.ClientCredentialsAuthenticator` for
    ready-made implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from apiwire.wire import WireRequest


class Authenticator(ABC):
    """Pluggable credential attachment and refresh.

    Subclasses must keep a strong reference to themselves somewhere
    outside the client (the client only holds a weak one).
    """

    @abstractmethod
    def apply_authorization(self, request: WireRequest) -> None:
        """Attach credentials to *request*.

        Args:
            request: The wire request under construction. Mutate its
                headers or URL in place.

        Raises:
            AuthorizationError: If credentials cannot be attached. Any
                other exception is wrapped in one by the client.
        """
        ...

    @abstractmethod
    async def refresh_authorization(self, response: httpx.Response) -> None:
        """Renew credentials after *response* came back 401.

        Args:
            response: The 401 response that triggered the refresh.

        Raises:
            Exception: Any failure. The client then reports the original
                401 as :class:`~apiwire.exceptions.HTTPStatusError`.
        """
        ...
