"""Dispatch a request body or a response type to the right codec.

The set of body shapes a request may carry is closed: an
:class:`EncodableBody` instance, or a list of :class:`JSONBody` items
(lists of such lists nest to any depth). Response types are either a
:class:`DecodableBody` subclass or ``list[...]`` whose innermost element
is a :class:`JSONBody` subclass, e.g. ``list[User]`` or
``list[list[User]]``. These helpers pick the codec and make sure every
failure surfaces as :class:`~apiwire.exceptions.CodecError`.
"""

from __future__ import annotations

import functools
import typing
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from apiwire.codec.base import DecodableBody, EncodableBody
from apiwire.codec.json import JSONArray, JSONBody
from apiwire.exceptions import CodecError
from apiwire.wire import WireRequest


def _is_decodable_class(response_type: Any) -> bool:
    # Parameterized generics such as list[str] pass isinstance(..., type) on some interpreters.
    if typing.get_origin(response_type) is not None:
        return False
    return isinstance(response_type, type) and issubclass(response_type, DecodableBody)


def _is_json_list_type(response_type: Any) -> bool:
    """Whether *response_type* is ``list[T]`` with ``T`` a JSONBody or itself such a list."""
    if typing.get_origin(response_type) is not list:
        return False
    args = typing.get_args(response_type)
    if len(args) != 1:
        return False
    (item_type,) = args
    if _is_decodable_class(item_type) and issubclass(item_type, JSONBody):
        return True
    return _is_json_list_type(item_type)


def _is_json_sequence(body: Any) -> bool:
    return all(
        isinstance(item, JSONBody) or (isinstance(item, (list, tuple)) and _is_json_sequence(item))
        for item in body
    )


@functools.lru_cache(maxsize=None)
def _list_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def encode_body(body: Any, request: WireRequest) -> None:
    """Encode *body* into *request*.

    Raises:
        CodecError: If *body* is not an encodable shape or its encoder fails.
    """
    if isinstance(body, (list, tuple)):
        if not _is_json_sequence(body):
            raise CodecError("Only sequences of JSONBody items can be sent as a request body")
        body = JSONArray(body)

    if not isinstance(body, EncodableBody):
        raise CodecError(f"{type(body).__name__} is not an encodable request body")

    try:
        body.encode(request)
    except CodecError:
        raise
    except Exception as exc:
        raise CodecError(f"Cannot encode {type(body).__name__}: {exc}") from exc


def decode_body(response_type: Any, content: bytes, response: httpx.Response) -> Any:
    """Decode *content* into *response_type*.

    Args:
        response_type: A :class:`DecodableBody` subclass or a (nested)
            ``list`` of a :class:`JSONBody` subclass.
        content: The raw response body.
        response: The response *content* arrived on.

    Raises:
        CodecError: If *response_type* is not decodable or decoding fails.
    """
    try:
        if _is_json_list_type(response_type):
            return _list_adapter(response_type).validate_json(content)
        if _is_decodable_class(response_type):
            return response_type.decode(content, response)
    except CodecError:
        raise
    except ValidationError as exc:
        raise CodecError(f"Cannot decode {response_type!r} from response body: {exc}") from exc
    except Exception as exc:
        raise CodecError(f"Cannot decode {response_type!r}: {exc}") from exc

    raise CodecError(f"{response_type!r} is not a decodable response type")


def is_decodable_type(response_type: Any) -> bool:
    """Whether *response_type* can be handed to :func:`decode_body`."""
    return _is_json_list_type(response_type) or _is_decodable_class(response_type)
