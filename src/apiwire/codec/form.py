"""Form payloads: ``application/x-www-form-urlencoded`` and ``multipart/form-data``.

Both encoders write the whole body into ``WireRequest.content`` and set
the matching ``Content-Type`` header. Multipart output is deterministic
apart from the boundary token: fields and files are emitted sorted by
name.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

from apiwire.codec.base import EncodableBody
from apiwire.exceptions import CodecError
from apiwire.wire import WireRequest

# RFC 3986 query characters minus the general (":#[]@") and sub ("!$&'()*+,;=")
# delimiters. "?" and "/" stay literal (RFC 3986 section 3.4).
_FORM_SAFE = "/?"

_CRLF = b"\r\n"


def _form_quote(value: str) -> str:
    return quote(value, safe=_FORM_SAFE)


def _utf8(text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CodecError(f"Form data is not representable as UTF-8: {exc}") from exc


class URLEncodedBody(EncodableBody):
    """A URL-encoded form body.

    Values are percent-encoded; keys are written verbatim. Pairs keep the
    mapping's iteration order.

    Example::

        URLEncodedBody({"a": "1", "b": "x y"})   # body: a=1&b=x%20y
    """

    def __init__(self, params: Mapping[str, str]) -> None:
        self._params = dict(params)

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    def encode(self, request: WireRequest) -> None:
        query = "&".join(f"{key}={_form_quote(value)}" for key, value in self._params.items())
        request.content = _utf8(query)
        request.headers["Content-Type"] = "application/x-www-form-urlencoded"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, URLEncodedBody) and other._params == self._params

    def __repr__(self) -> str:
        return f"URLEncodedBody({self._params!r})"


@dataclass(frozen=True)
class FormFile:
    """A file part of a multipart form.

    Attributes:
        data: Raw file bytes.
        content_type: MIME type sent in the part's ``Content-Type`` header.
        filename: Name sent in the ``Content-Disposition`` header.
    """

    data: bytes
    content_type: str
    filename: str


class MultipartFormDataBody(EncodableBody):
    """A ``multipart/form-data`` body made of scalar fields and files.

    Each :meth:`encode` call draws a fresh random boundary. Scalar fields
    come first, then files, each group sorted by name, so two encodings
    of the same body differ only in the boundary.

    Args:
        params: Scalar form fields.
        files: File parts keyed by field name.
    """

    def __init__(
        self,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, FormFile]] = None,
    ) -> None:
        self._params = dict(params or {})
        self._files = dict(files or {})

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    @property
    def files(self) -> dict[str, FormFile]:
        return dict(self._files)

    @staticmethod
    def make_boundary() -> str:
        return str(uuid.uuid4()).upper()

    def encode(self, request: WireRequest) -> None:
        boundary = self.make_boundary()
        request.content = self.render(boundary)
        request.headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"

    def render(self, boundary: str) -> bytes:
        """Serialize the body using *boundary* as the part delimiter."""
        delimiter = _utf8(f"--{boundary}\r\n")
        data = bytearray()

        for key, value in sorted(self._params.items()):
            data += delimiter
            data += _utf8(f'Content-Disposition: form-data; name="{key}"\r\n\r\n')
            data += _utf8(value)
            data += _CRLF

        for key, file in sorted(self._files.items()):
            data += delimiter
            data += _utf8(
                f'Content-Disposition: form-data; name="{key}"; filename="{file.filename}"\r\n'
            )
            data += _utf8(f"Content-Type: {file.content_type}\r\n\r\n")
            data += file.data
            data += _CRLF

        data += _utf8(f"--{boundary}--\r\n")
        return bytes(data)

    def __repr__(self) -> str:
        return f"MultipartFormDataBody(params={self._params!r}, files={sorted(self._files)!r})"
