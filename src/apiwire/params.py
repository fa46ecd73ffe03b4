"""Query parameters attached to a request descriptor.

:class:`Params` is a two-case value: no extra query parameters, or a
mapping of key/value pairs to append to the URL. Appending never replaces
existing query items, so ``?x=0`` merged with ``{"x": "1"}`` carries both.
The existing query string is kept byte for byte, including bare flags
such as ``?verbose``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

import httpx

from apiwire.output import get_output
from apiwire.wire import WireRequest


_QUERY_SAFE = "/?"


def _query_quote(value: str) -> str:
    return quote(value, safe=_QUERY_SAFE)


@dataclass(frozen=True)
class Params:
    """Query parameters for a request.

    Use :meth:`none` for requests without extra query parameters and
    :meth:`query` for everything else.

    Example::

        Params.query({"page": "2", "per_page": "50"})
    """

    items: Optional[Mapping[str, str]] = None

    @classmethod
    def none(cls) -> Params:
        """No extra query parameters."""
        return cls()

    @classmethod
    def query(cls, items: Mapping[str, str]) -> Params:
        """Append *items* to the request URL's query string."""
        return cls(items=dict(items))

    @property
    def is_none(self) -> bool:
        return self.items is None

    def add_to(self, request: WireRequest) -> None:
        """Append these parameters to *request*'s URL.

        Existing query items are kept verbatim and the new ones appended
        after them; duplicate keys become separate entries. Keys and values
        are percent-encoded, keeping ``/`` and ``?``. A URL that cannot be
        parsed is left untouched.
        """
        if not self.items:
            return

        added = "&".join(f"{_query_quote(key)}={_query_quote(value)}" for key, value in self.items.items())
        try:
            url = httpx.URL(request.url)
            existing = url.query.decode("ascii")
            query = f"{existing}&{added}" if existing else added
            request.url = url.copy_with(query=query.encode("ascii"))
        except httpx.InvalidURL as exc:
            get_output().debug(f"Skipping query parameters, cannot parse URL {request.url!s}: {exc}")
