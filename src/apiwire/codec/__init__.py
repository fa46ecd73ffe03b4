"""Request and response body codecs.

The contracts live in :mod:`apiwire.codec.base`; concrete payloads in
:mod:`apiwire.codec.form` (URL-encoded and multipart forms) and
:mod:`apiwire.codec.json` (Pydantic-backed JSON). The client reaches all
of them through :func:`encode_body` and :func:`decode_body`.

Example::

    from apiwire.codec import JSONBody, URLEncodedBody

    class Login(JSONBody):
        username: str
        password: str
"""

from apiwire.codec.base import DecodableBody, EncodableBody, NoBody
from apiwire.codec.dispatch import decode_body, encode_body, is_decodable_type
from apiwire.codec.form import FormFile, MultipartFormDataBody, URLEncodedBody
from apiwire.codec.json import JSONArray, JSONBody

__all__ = [
    "DecodableBody",
    "EncodableBody",
    "FormFile",
    "JSONArray",
    "JSONBody",
    "MultipartFormDataBody",
    "NoBody",
    "URLEncodedBody",
    "decode_body",
    "encode_body",
    "is_decodable_type",
]
