"""Tests for edgerouter.binding — argument resolution and coercion."""

import logging

import pytest

from edgerouter.binding import bind, coerce
from edgerouter.errors import ClientError, StructuredError
from edgerouter.http.request import Request
from edgerouter.routing.descriptors import describe_handler, param


def _request(url: str = "https://x/", **kwargs: object) -> Request:
    return Request.build("GET", url, **kwargs)  # type: ignore[arg-type]


async def search(age, token, request):
    """
    @param where:query type:number name:age
    @param where:header type:string name:token optional
    """


class TestCoerce:
    def test_string_passthrough(self) -> None:
        assert coerce("a", "hello", "string", location="query") == "hello"

    def test_any_passthrough(self) -> None:
        assert coerce("a", "5", "any", location="path") == "5"

    @pytest.mark.parametrize(("raw", "expected"), [("5", 5), ("-3", -3), ("2.5", 2.5), ("1e3", 1000.0)])
    def test_number(self, raw: str, expected: float) -> None:
        value = coerce("age", raw, "number", location="query")
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("raw", ["abc", "nan", "5px", "1_000", "inf", "-Infinity"])
    def test_invalid_number(self, raw: str) -> None:
        with pytest.raises(ClientError) as exc_info:
            coerce("age", raw, "number", location="query")
        assert exc_info.value.status_message == "Invalid data type for age! Should be 'number'!"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("T", True), ("1", True), ("false", False), ("f", False), ("0", False)])
    def test_boolean(self, raw: str, expected: bool) -> None:
        assert coerce("flag", raw, "boolean", location="query") is expected

    def test_invalid_boolean(self) -> None:
        with pytest.raises(ClientError, match="Should be 'boolean'"):
            coerce("flag", "yes", "boolean", location="query")

    def test_object_from_query_is_unquoted(self) -> None:
        assert coerce("f", "%7B%22a%22%3A1%7D", "object", location="query") == {"a": 1}

    def test_object_from_body_is_not_unquoted(self) -> None:
        assert coerce("data", '{"q":"a%20b"}', "object", location="body") == {"q": "a%20b"}

    def test_invalid_json(self) -> None:
        with pytest.raises(ClientError, match="Invalid JSON for f!"):
            coerce("f", "{nope", "object", location="query")

    @pytest.mark.parametrize(
        ("location", "message"),
        [
            ("query", "Missing required query parameter age!"),
            ("path", "Missing required path parameter age!"),
            ("header", "Missing required header age!"),
            ("cookie", "Missing required cookie age!"),
            ("body", "Missing required body age!"),
        ],
    )
    def test_missing_required(self, location: str, message: str) -> None:
        with pytest.raises(ClientError) as exc_info:
            coerce("age", None, "number", location=location)
        assert exc_info.value.status_message == message

    def test_empty_counts_as_missing(self) -> None:
        with pytest.raises(ClientError, match="Missing required"):
            coerce("age", "", "number", location="query")

    def test_missing_optional(self) -> None:
        assert coerce("age", None, "number", location="query", optional=True) is None
        assert coerce("age", "", "string", location="query", optional=True) is None


class TestBind:
    @pytest.mark.anyio
    async def test_declared_order(self) -> None:
        request = _request("https://x/search?age=5", headers={"Token": "s3cret"})
        args = await bind(request, describe_handler(search), {})
        assert args == [5, "s3cret", request]

    @pytest.mark.anyio
    async def test_optional_absent(self) -> None:
        request = _request("https://x/search?age=5")
        args = await bind(request, describe_handler(search), {})
        assert args[:2] == [5, None]  # type: ignore[index]

    @pytest.mark.anyio
    async def test_missing_required_is_value(self) -> None:
        result = await bind(_request("https://x/search"), describe_handler(search), {})
        assert result == StructuredError(400, "Missing required query parameter age!")

    @pytest.mark.anyio
    async def test_invalid_is_value(self) -> None:
        result = await bind(_request("https://x/search?age=old"), describe_handler(search), {})
        assert result == StructuredError(400, "Invalid data type for age! Should be 'number'!")

    @pytest.mark.anyio
    async def test_path_params_typed(self) -> None:
        async def get_item(id):
            """@param where:path type:number name:id"""

        assert await bind(_request(), describe_handler(get_item), {"id": "42"}) == [42]

    @pytest.mark.anyio
    async def test_cookie(self) -> None:
        async def handler(session):
            """@param where:cookie type:string name:session"""

        request = _request(headers={"Cookie": "session=abc; session=def"})
        assert await bind(request, describe_handler(handler), {}) == ["abc"]

    @pytest.mark.anyio
    async def test_body_object(self) -> None:
        async def handler(data):
            """@param where:body type:object name:data contentType:application/json"""

        request = Request.build("POST", "https://x/", body='{"a": [1, 2]}')
        assert await bind(request, describe_handler(handler), {}) == [{"a": [1, 2]}]

    @pytest.mark.anyio
    async def test_missing_body(self) -> None:
        async def handler(data):
            """@param where:body type:object name:data"""

        result = await bind(Request.build("POST", "https://x/"), describe_handler(handler), {})
        assert result == StructuredError(400, "Missing required body data!")

    @pytest.mark.anyio
    async def test_explicit_descriptor(self) -> None:
        async def handler(limit):
            pass

        meta = describe_handler(handler, params=[param("limit", "query", "number")])
        assert await bind(_request("https://x/?limit=10"), meta, {}) == [10]

    @pytest.mark.anyio
    async def test_undocumented_is_none_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        async def handler(mystery):
            pass

        with caplog.at_level(logging.WARNING, logger="edgerouter.dispatch"):
            args = await bind(_request(), describe_handler(handler), {})
        assert args == [None]
        assert "mystery" in caplog.text
