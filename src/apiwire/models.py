"""Pydantic models and enums shared across apiwire modules.

**Request vocabulary**:
    :class:`HTTPMethod` -- the closed set of methods a request descriptor
    may declare.

**Configuration models** -- loaded from ``apiwire.json`` or the
environment by :mod:`apiwire.config`:
    :class:`RequestConfig` and :class:`ClientConfig`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class HTTPMethod(str, enum.Enum):
    """HTTP methods supported by request descriptors."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class RequestConfig(BaseModel):
    """Settings handed to the default :class:`~apiwire.client.HTTPXTransport`.

    Example::

        RequestConfig(timeout=10, verify_ssl=False)
    """

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class ClientConfig(BaseModel):
    """Configuration for a :class:`~apiwire.client.Client`.

    Typically produced by :func:`~apiwire.config.resolve_config`, which
    layers explicit arguments, environment variables, and a project
    ``apiwire.json`` on top of these defaults.

    Attributes:
        base_url: Root URL every request path is appended to.
        headers: Default headers applied before request-specific ones.
        request: Transport settings.
        max_auth_refreshes: Refresh-and-retry cycles allowed per call
            after a 401. ``None`` removes the ceiling.
    """

    base_url: str = Field(description="Base URL, e.g. https://api.example.com/v1")
    headers: dict[str, str] = Field(default_factory=dict)
    request: RequestConfig = Field(default_factory=RequestConfig)
    max_auth_refreshes: Optional[int] = Field(default=3, ge=0)

    @field_validator("base_url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got '{value}'")
        return value
