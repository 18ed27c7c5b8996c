"""Middleware callable shapes.

Sync and async callables are both accepted::

    async def add_user(request: Request) -> Request:
        return request.with_header("X-User", "alice")

    def stamp(response: Response) -> Response:
        return response.with_header("X-Served-By", "edge")
"""

from collections.abc import Awaitable, Callable
from typing import Literal

from edgerouter.http.request import Request
from edgerouter.http.response import Response

type BeforeMiddleware = Callable[[Request], Request | Awaitable[Request]]
type AfterMiddleware = Callable[[Response], Response | Awaitable[Response]]

type Direction = Literal["before", "after", "error"]

# Category whose response-shaped middleware runs only on error responses
ERROR_CATEGORY = "error"
