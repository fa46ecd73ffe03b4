"""apiwire -- typed HTTP requests and responses routed through one client.

Callers describe each endpoint as a :class:`~apiwire.request.Request`
subclass (path, method, headers, query parameters, body, whether it needs
authorization, and what the response decodes into). A single
:class:`~apiwire.client.Client` builds the wire request, sends it through
a transport, decodes 2xx responses, and retries once per refresh when an
attached :class:`~apiwire.auth.Authenticator` renews expired credentials
after a 401.

Typical usage::

    from apiwire import Client, HTTPMethod, JSONBody, Request

    class User(JSONBody):
        user_id: str
        name: str

    class GetUser(Request[User]):
        method = HTTPMethod.GET
        response_type = User

        def __init__(self, user_id: str) -> None:
            self.path = ["users", user_id]

    async with Client("https://api.example.com") as client:
        user = await client.send(GetUser("42"))

Modules:
    client: the client pipeline, shared state and transports.
    request: request descriptors.
    params: query parameters.
    codec: body encoders and decoders.
    auth: the authenticator contract and built-in authenticators.
    config: configuration precedence and credential sources.
    exceptions: the error taxonomy.
    output: stderr diagnostics.
"""

from apiwire.auth import Authenticator, BearerTokenAuthenticator, ClientCredentialsAuthenticator
from apiwire.client import Client, HTTPXTransport, Transport
from apiwire.codec import (
    DecodableBody,
    EncodableBody,
    FormFile,
    JSONArray,
    JSONBody,
    MultipartFormDataBody,
    NoBody,
    URLEncodedBody,
)
from apiwire.exceptions import (
    ApiwireError,
    AuthorizationError,
    CodecError,
    ConfigError,
    HTTPStatusError,
    RequestError,
    TransportError,
)
from apiwire.models import ClientConfig, HTTPMethod, RequestConfig
from apiwire.params import Params
from apiwire.request import Request
from apiwire.wire import WireRequest

__version__ = "0.1.0"

__all__ = [
    "ApiwireError",
    "Authenticator",
    "AuthorizationError",
    "BearerTokenAuthenticator",
    "Client",
    "ClientConfig",
    "ClientCredentialsAuthenticator",
    "CodecError",
    "ConfigError",
    "DecodableBody",
    "EncodableBody",
    "FormFile",
    "HTTPMethod",
    "HTTPStatusError",
    "HTTPXTransport",
    "JSONArray",
    "JSONBody",
    "MultipartFormDataBody",
    "NoBody",
    "Params",
    "Request",
    "RequestError",
    "RequestConfig",
    "Transport",
    "TransportError",
    "URLEncodedBody",
    "WireRequest",
]
