"""Tests for edgerouter.config — RouterConfig defaults and immutability."""

import dataclasses

import pytest

from edgerouter.config import RouterConfig
from edgerouter.http.headers import Headers


class TestRouterConfig:
    def test_defaults(self) -> None:
        config = RouterConfig()
        assert config.handle_errors is True
        assert config.internal_routes is True
        assert config.enable_trace is False

    def test_default_headers(self) -> None:
        headers = Headers(RouterConfig().default_headers)
        assert headers["access-control-allow-origin"] == "*"
        assert headers["content-type"] == "application/json"
        assert headers["accept-charset"] == "utf-8"

    def test_frozen(self) -> None:
        config = RouterConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.handle_errors = False  # type: ignore[misc]

    def test_override(self) -> None:
        config = RouterConfig(title="Pets", version="2.0.0")
        assert config.title == "Pets"
        assert config.version == "2.0.0"
