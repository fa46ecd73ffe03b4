"""HTTP client module for apiwire.

Classes:
    :class:`Client` -- builds, sends and decodes typed requests, with a
    one-step 401 refresh-and-retry.
    :class:`ClientState` -- serialized store for default headers and the
    weakly referenced authenticator.
    :class:`Transport` -- the sending contract.
    :class:`HTTPXTransport` -- default transport backed by :class:`httpx.AsyncClient`.

Example::

    from apiwire.client import Client

    async with Client("https://api.example.com") as client:
        user = await client.send(GetUser("42"))
"""

from apiwire.client.client import Client
from apiwire.client.state import ClientState, StateSnapshot
from apiwire.client.transport import HTTPXTransport, Transport

__all__ = ["Client", "ClientState", "HTTPXTransport", "StateSnapshot", "Transport"]
