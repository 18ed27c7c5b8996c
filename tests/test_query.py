"""Tests for edgerouter.http.query — raw query string parsing."""

from edgerouter.http.query import parse_query


class TestParseQuery:
    def test_pairs(self) -> None:
        assert parse_query("a=1&b=2") == {"a": "1", "b": "2"}

    def test_last_value_wins(self) -> None:
        assert parse_query("a=1&a=2") == {"a": "2"}

    def test_flag_without_value(self) -> None:
        assert parse_query("flag") == {"flag": ""}

    def test_splits_on_first_equals(self) -> None:
        assert parse_query("expr=a=b") == {"expr": "a=b"}

    def test_values_stay_encoded(self) -> None:
        assert parse_query("q=hello%20world") == {"q": "hello%20world"}

    def test_empty(self) -> None:
        assert parse_query("") == {}

    def test_skips_empty_pairs(self) -> None:
        assert parse_query("a=1&&b=2&") == {"a": "1", "b": "2"}

