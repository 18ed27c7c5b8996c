"""Middleware — plain callables filtered by direction and category.

A middleware takes exactly one parameter:

    request   -> "before" middleware, returns a (possibly new) Request
    response  -> "after" middleware, returns a (possibly new) Response;
                 registered under the "error" category it runs only on
                 error responses
"""

from edgerouter.middleware.protocol import AfterMiddleware, BeforeMiddleware
from edgerouter.middleware.registry import MiddlewareEntry, MiddlewareRegistry

__all__ = [
    "AfterMiddleware",
    "BeforeMiddleware",
    "MiddlewareEntry",
    "MiddlewareRegistry",
]
