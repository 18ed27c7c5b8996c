"""Tests for edgerouter's lazy top-level exports."""

import pytest

import edgerouter


class TestLazyImports:
    @pytest.mark.parametrize("name", edgerouter.__all__)
    def test_every_public_name_resolves(self, name: str) -> None:
        assert getattr(edgerouter, name) is not None

    def test_same_object_as_submodule(self) -> None:
        from edgerouter.router import EdgeRouter

        assert edgerouter.EdgeRouter is EdgeRouter

    def test_unknown_name(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            edgerouter.Nope  # noqa: B018
