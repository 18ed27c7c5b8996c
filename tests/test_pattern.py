"""Tests for edgerouter.routing.pattern — path template compilation."""

import pytest

from edgerouter.errors import InvalidPatternError
from edgerouter.routing.pattern import compile_pattern


class TestCompilePattern:
    def test_literal(self) -> None:
        pattern = compile_pattern("/users")
        assert pattern.params == ()
        assert pattern.display == "/users"
        assert pattern.match("/users") == {}
        assert pattern.match("/users/1") is None

    def test_placeholder(self) -> None:
        pattern = compile_pattern("/user/:name")
        assert pattern.params == ("name",)
        assert pattern.display == "/user/{name}"
        assert pattern.match("/user/alice") == {"name": "alice"}

    def test_placeholder_is_one_segment(self) -> None:
        pattern = compile_pattern("/user/:name")
        assert pattern.match("/user/alice/posts") is None
        assert pattern.match("/user/") is None

    def test_anchored(self) -> None:
        pattern = compile_pattern("/user/:name")
        assert pattern.match("/api/user/alice") is None
        assert pattern.match("/user/alice/") is None

    def test_several_placeholders(self) -> None:
        pattern = compile_pattern("/org/:org/repo/:repo")
        assert pattern.params == ("org", "repo")
        assert pattern.match("/org/acme/repo/rocket") == {"org": "acme", "repo": "rocket"}

    def test_literal_metacharacters_escaped(self) -> None:
        pattern = compile_pattern("/openapi.json")
        assert pattern.match("/openapi.json") == {}
        assert pattern.match("/openapiXjson") is None

    def test_root(self) -> None:
        assert compile_pattern("/").match("/") == {}

    def test_wildcard(self) -> None:
        pattern = compile_pattern("*")
        assert pattern.is_wildcard
        assert pattern.match("/anything/at/all") == {}
        assert not compile_pattern("/x").is_wildcard


class TestInvalidPatterns:
    def test_duplicate_placeholder(self) -> None:
        with pytest.raises(InvalidPatternError, match="more than once"):
            compile_pattern("/a/:id/b/:id")

    @pytest.mark.parametrize("template", ["/user/:", "/user/:1st", "/user/:na-me"])
    def test_bad_placeholder_name(self, template: str) -> None:
        with pytest.raises(InvalidPatternError):
            compile_pattern(template)
