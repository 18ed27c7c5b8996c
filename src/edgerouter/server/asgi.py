"""ASGI handling — translates ASGI scopes and messages to edgerouter types.

The only module that touches raw ASGI messages. Converts the scope to a
Request, runs the dispatcher, and sends the Response through ``send()``.
"""

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from edgerouter.http.request import Receive, Request
from edgerouter.http.response import Response

logger = logging.getLogger("edgerouter.server")

type Scope = MutableMapping[str, Any]
type Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
type Dispatch = Callable[[Request], Awaitable[Response]]


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    body = response.body if _body_allowed(response.status) else b""

    raw_headers = [
        pair for pair in response.headers.to_raw() if pair[0] != b"content-length"
    ]
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})


async def handle_http(scope: Scope, receive: Receive, send: Send, *, dispatch: Dispatch) -> None:
    """Process a single HTTP scope through *dispatch*."""
    request = Request.from_asgi(scope, receive)
    response = await dispatch(request)
    await send_response(response, send)


async def handle_lifespan(receive: Receive, send: Send) -> None:
    """Acknowledge lifespan startup and shutdown. There are no hooks to run."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            logger.debug("lifespan startup")
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            logger.debug("lifespan shutdown")
            await send({"type": "lifespan.shutdown.complete"})
            return
