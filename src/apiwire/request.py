"""Request descriptors -- caller-defined descriptions of one logical HTTP call.

Subclass :class:`Request` once per endpoint. Only ``path``, ``method``
and ``response_type`` are mandatory; everything else has a default that
suits a plain authorized call without query parameters or body.

Attributes may be plain class attributes or properties computed from
constructor arguments::

    class GetUser(Request[User]):
        method = HTTPMethod.GET
        response_type = User

        def __init__(self, user_id: str) -> None:
            self.user_id = user_id

        @property
        def path(self) -> list[str]:
            return ["users", self.user_id]

The client treats a descriptor as an immutable value: it is read once per
attempt and never modified, so an auth retry re-sends the exact same
logical request.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Generic, Mapping, Sequence, TypeVar

from apiwire.codec.base import NoBody
from apiwire.models import HTTPMethod
from apiwire.params import Params

ResponseT = TypeVar("ResponseT")


class Request(Generic[ResponseT]):
    """Base class for request descriptors.

    Attributes:
        path: Path segments appended in order under the client's base URL.
        method: The HTTP method.
        headers: Request-specific headers, applied after the client's
            defaults so they win on conflicts.
        params: Query parameters to merge into the URL.
        body: An :class:`~apiwire.codec.EncodableBody` or a list of
            :class:`~apiwire.codec.JSONBody` items.
        requires_authorization: Whether the client should ask its
            authenticator to attach credentials and refresh them on 401.
        response_type: What a 2xx response decodes into.
    """

    path: Sequence[str]
    method: HTTPMethod
    response_type: Any = NoBody

    headers: Mapping[str, str] = MappingProxyType({})
    params: Params = Params.none()
    body: Any = NoBody()
    requires_authorization: bool = True

    def describe(self) -> str:
        """A short ``METHOD /a/b`` label for diagnostics."""
        method = self.method.value if isinstance(self.method, HTTPMethod) else str(self.method)
        return f"{method} /{'/'.join(self.path)}"
