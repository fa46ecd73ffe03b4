"""Tests for request descriptor defaults."""

from __future__ import annotations

import pytest

from apiwire.codec import NoBody
from apiwire.models import HTTPMethod
from apiwire.params import Params
from apiwire.request import Request


class Health(Request[NoBody]):
    path = ["status", "health"]
    method = HTTPMethod.GET


class Item(Request[NoBody]):
    method = HTTPMethod.DELETE

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id

    @property
    def path(self) -> list[str]:
        return ["items", self.item_id]


class TestRequestDefaults:
    def test_defaults(self) -> None:
        request = Health()

        assert request.headers == {}
        assert request.params == Params.none()
        assert request.body == NoBody()
        assert request.requires_authorization is True
        assert request.response_type is NoBody

    def test_default_headers_read_only(self) -> None:
        request = Health()
        with pytest.raises(TypeError):
            request.headers["X-Leak"] = "1"  # type: ignore[index]

        assert Item("7").headers == {}

    def test_describe(self) -> None:
        assert Health().describe() == "GET /status/health"

    def test_computed_path(self) -> None:
        assert Item("7").describe() == "DELETE /items/7"
