"""Body codec contracts.

This module defines the two capabilities every payload type plugs into:

- :class:`EncodableBody` -- writes itself into a
  :class:`~apiwire.wire.WireRequest`, setting ``content`` and usually a
  ``Content-Type`` header.
- :class:`DecodableBody` -- builds an instance from response bytes plus
  the :class:`httpx.Response` they arrived on.

:class:`NoBody` implements both: it writes nothing and decodes to itself,
which makes it the default body and the default response type of a
request descriptor.

To add a payload type, subclass one or both contracts. Most callers will
not need to: :class:`~apiwire.codec.JSONBody`,
:class:`~apiwire.codec.URLEncodedBody` and
:class:`~apiwire.codec.MultipartFormDataBody` cover the common cases.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TypeVar

import httpx

from apiwire.wire import WireRequest

DecodableT = TypeVar("DecodableT", bound="DecodableBody")


class EncodableBody(ABC):
    """A request payload that knows how to serialize itself."""

    @abstractmethod
    def encode(self, request: WireRequest) -> None:
        """Write this payload into *request*.

        Implementations set ``request.content`` and, when relevant, the
        ``Content-Type`` header.

        Raises:
            CodecError: If the payload cannot be serialized.
        """
        ...


class DecodableBody(ABC):
    """A response payload that knows how to parse itself."""

    @classmethod
    @abstractmethod
    def decode(cls: type[DecodableT], content: bytes, response: httpx.Response) -> DecodableT:
        """Parse *content* into an instance of this type.

        Args:
            content: The raw response body.
            response: The response the body arrived on, for types that
                need status or headers.

        Raises:
            CodecError: If *content* is not a valid encoding of this type.
        """
        ...


class NoBody(EncodableBody, DecodableBody):
    """An empty payload. Encodes nothing and decodes from anything."""

    def encode(self, request: WireRequest) -> None:
        pass

    @classmethod
    def decode(cls, content: bytes, response: httpx.Response) -> NoBody:
        return cls()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoBody)

    def __hash__(self) -> int:
        return hash(NoBody)

    def __repr__(self) -> str:
        return "NoBody()"
