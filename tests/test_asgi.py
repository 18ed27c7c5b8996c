"""Tests for the ASGI entry point, sender, and TestClient."""

import pytest

from edgerouter import EdgeRouter, RouterConfig
from edgerouter.http.response import Response
from edgerouter.server.asgi import send_response
from edgerouter.testing import TestClient


async def echo(request):
    return {"path": request.path, "query": request.query, "host": request.headers.get("host")}


async def create(data):
    """@param where:body type:object name:data"""
    return {"created": data}


def _router() -> EdgeRouter:
    router = EdgeRouter(RouterConfig(internal_routes=False))
    router.get("/echo", echo).post("/items", create)
    return router


class TestSendResponse:
    @pytest.mark.anyio
    async def test_start_and_body(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response(body=b"ok").with_header("X-A", "1"), send)
        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"x-a"] == b"1"
        assert headers[b"content-length"] == b"2"
        assert messages[1] == {"type": "http.response.body", "body": b"ok"}

    @pytest.mark.anyio
    async def test_204_drops_body(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response(body=b"unexpected", status=204), send)
        assert dict(messages[0]["headers"])[b"content-length"] == b"0"
        assert messages[1]["body"] == b""


class TestLifespan:
    @pytest.mark.anyio
    async def test_acknowledged(self) -> None:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive() -> dict:
            return incoming.pop(0)

        async def send(message: dict) -> None:
            sent.append(message)

        await _router()({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]


class TestClientRoundTrip:
    @pytest.mark.anyio
    async def test_get(self) -> None:
        async with TestClient(_router()) as client:
            response = await client.get("/echo?a=1")
        assert response.status == 200
        assert response.json() == {"path": "/echo", "query": {"a": "1"}, "host": "testserver"}

    @pytest.mark.anyio
    async def test_post_json(self) -> None:
        async with TestClient(_router()) as client:
            response = await client.post("/items", json={"name": "widget"})
        assert response.json() == {"created": {"name": "widget"}}

    @pytest.mark.anyio
    async def test_options(self) -> None:
        async with TestClient(_router()) as client:
            response = await client.options("/echo")
        assert response.json() == {"allowed_methods": ["GET", "OPTIONS"]}

    @pytest.mark.anyio
    async def test_head(self) -> None:
        async with TestClient(_router()) as client:
            response = await client.head("/echo")
        assert response.status == 200
        assert response.body == b""

    @pytest.mark.anyio
    async def test_not_found(self) -> None:
        async with TestClient(_router()) as client:
            response = await client.delete("/nope")
        assert response.status == 404
        assert response.json() == {"detail": "Not Found"}
