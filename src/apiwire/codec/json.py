"""JSON payloads backed by Pydantic models.

:class:`JSONBody` is a :class:`pydantic.BaseModel` that is both an
:class:`~apiwire.codec.base.EncodableBody` and a
:class:`~apiwire.codec.base.DecodableBody`. It follows one wire
convention in both directions:

* **snake_case keys** -- field names are converted with
  :func:`pydantic.alias_generators.to_snake` on the way out and matched
  against snake_case keys on the way in, so a field declared as
  ``createdAt`` travels as ``created_at``.
* **epoch-second dates** -- every :class:`~datetime.datetime`, however
  deeply nested in lists, dicts or other models, is written as seconds
  since 1970 (an integer when whole). Numeric timestamps are parsed back
  into UTC-aware datetimes.
* **absent optionals** -- fields whose value is ``None`` are left out
  rather than written as ``null``.

Arrays are handled separately: :meth:`JSONBody.decode_list` parses a JSON
array of a model and :class:`JSONArray` encodes a sequence of models, or
of sequences of models.

Example::

    class User(JSONBody):
        user_id: str
        createdAt: datetime

    User(user_id="42", createdAt=now).encode(request)
    # {"user_id": "42", "created_at": 1714646400}
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence, TypeVar, Union

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_snake
from pydantic_core import to_json

from apiwire.codec.base import DecodableBody, EncodableBody
from apiwire.exceptions import CodecError
from apiwire.wire import WireRequest

JSONBodyT = TypeVar("JSONBodyT", bound="JSONBody")

JSON_CONTENT_TYPE = "application/json"


def epoch_seconds(value: datetime) -> int | float:
    """Return *value* as seconds since the Unix epoch, as an int when whole."""
    seconds = value.timestamp()
    return int(seconds) if seconds.is_integer() else seconds


def _epoch_dates(value: Any) -> Any:
    """Replace every datetime in a dumped structure with epoch seconds."""
    if isinstance(value, datetime):
        return epoch_seconds(value)
    if isinstance(value, dict):
        return {key: _epoch_dates(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_epoch_dates(item) for item in value]
    return value


def _wire_value(value: Any) -> Any:
    if isinstance(value, JSONBody):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_wire_value(item) for item in value]
    raise CodecError(f"{type(value).__name__} is not a JSONBody or a sequence of them")


def dump_json(value: Union[JSONBody, Sequence[Any]]) -> bytes:
    """Serialize a model, or a (nested) sequence of models, in wire form.

    Raises:
        CodecError: If *value* holds anything but models and sequences, or a
            field cannot be represented as JSON.
    """
    try:
        return to_json(_epoch_dates(_wire_value(value)))
    except (ValueError, TypeError) as exc:
        raise CodecError(f"Cannot encode {type(value).__name__} as JSON: {exc}") from exc


class JSONBody(BaseModel, EncodableBody, DecodableBody):
    """Base class for JSON request and response payloads.

    Subclass it and declare fields as on any Pydantic model. Use
    timezone-aware datetimes: naive values are interpreted in local time
    when converted to epoch seconds. Custom field serializers must apply
    in Python mode (the default ``when_used="always"``) to affect the wire
    form.
    """

    model_config = ConfigDict(alias_generator=to_snake, populate_by_name=True)

    def to_json_bytes(self) -> bytes:
        """Serialize with snake_case keys, epoch-second dates and no ``null`` fields."""
        return dump_json(self)

    def encode(self, request: WireRequest) -> None:
        request.content = self.to_json_bytes()
        request.headers["Content-Type"] = JSON_CONTENT_TYPE

    @classmethod
    def decode(cls: type[JSONBodyT], content: bytes, response: httpx.Response) -> JSONBodyT:
        """Parse *content* as this model. *response* is ignored unless a subclass overrides this."""
        try:
            return cls.model_validate_json(content)
        except ValidationError as exc:
            raise CodecError(f"Cannot decode {cls.__name__} from response body: {exc}") from exc

    @classmethod
    def decode_list(cls: type[JSONBodyT], content: bytes) -> list[JSONBodyT]:
        """Parse *content* as a JSON array of this model."""
        try:
            return TypeAdapter(list[cls]).validate_json(content)  # type: ignore[valid-type]
        except ValidationError as exc:
            raise CodecError(f"Cannot decode list[{cls.__name__}] from response body: {exc}") from exc


class JSONArray(EncodableBody):
    """A JSON array request body.

    Items are :class:`JSONBody` instances or sequences of them, to any
    depth, each serialized with the same conventions as a single
    :class:`JSONBody`.
    """

    def __init__(self, items: Sequence[Any]) -> None:
        self._items = list(items)

    @property
    def items(self) -> list[Any]:
        return list(self._items)

    def to_json_bytes(self) -> bytes:
        return dump_json(self._items)

    def encode(self, request: WireRequest) -> None:
        request.content = self.to_json_bytes()
        request.headers["Content-Type"] = JSON_CONTENT_TYPE

    def __eq__(self, other: object) -> bool:
        return isinstance(other, JSONArray) and other._items == self._items

    def __repr__(self) -> str:
        return f"JSONArray({self._items!r})"
