"""Middleware registry — an append-only, ordered list of entries.

Direction comes from the middleware's single parameter name. Chains are
filtered views: ``before(category)`` and ``after(category)`` keep entries
whose category equals the matched handler's category exactly;
``errors()`` keeps the error-category response middleware.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from edgerouter.errors import InvalidMiddlewareError
from edgerouter.middleware.protocol import (
    ERROR_CATEGORY,
    AfterMiddleware,
    BeforeMiddleware,
    Direction,
)
from edgerouter.routing.descriptors import DEFAULT_CATEGORY

_SHAPE_MSG = (
    "Invalid middleware function! Middleware must take a single parameter "
    'named either "request" or "response".'
)


@dataclass(frozen=True, slots=True)
class MiddlewareEntry:
    """A registered middleware and where it runs."""

    order: int
    direction: Direction
    category: str
    fn: Callable[..., Any]


def middleware_direction(fn: Callable[..., Any], category: str) -> Direction:
    """Derive a middleware's direction from its parameter name.

    Raises ``InvalidMiddlewareError`` unless *fn* takes exactly one
    parameter named ``request`` or ``response``, or when a request
    middleware is put in the error category.
    """
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError) as exc:
        raise InvalidMiddlewareError(_SHAPE_MSG) from exc

    if len(params) != 1 or params[0].name not in ("request", "response"):
        raise InvalidMiddlewareError(_SHAPE_MSG)

    if params[0].name == "request":
        if category == ERROR_CATEGORY:
            msg = (
                "Invalid middleware function! Middleware that takes a request "
                "(before middleware) cannot be in the error category."
            )
            raise InvalidMiddlewareError(msg)
        return "before"

    return "error" if category == ERROR_CATEGORY else "after"


class MiddlewareRegistry:
    """Ordered middleware entries. Appended during setup, read during dispatch.

    Usage::

        registry = MiddlewareRegistry()
        registry.use(authenticate, category="auth")
        for entry in registry.before("auth"):
            ...
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[MiddlewareEntry] = []

    def use(
        self, fn: BeforeMiddleware | AfterMiddleware, category: str = DEFAULT_CATEGORY
    ) -> MiddlewareEntry:
        """Append *fn* under *category*. Returns the new entry."""
        entry = MiddlewareEntry(
            order=len(self._entries),
            direction=middleware_direction(fn, category),
            category=category,
            fn=fn,
        )
        self._entries.append(entry)
        return entry

    def before(self, category: str | None) -> tuple[MiddlewareEntry, ...]:
        """Before middleware for a handler of *category*, in registration order."""
        return self._select("before", category)

    def after(self, category: str | None) -> tuple[MiddlewareEntry, ...]:
        """After middleware for a handler of *category*, in registration order."""
        return self._select("after", category)

    def errors(self) -> tuple[MiddlewareEntry, ...]:
        """Error-category middleware, in registration order."""
        return tuple(e for e in self._entries if e.direction == "error")

    def _select(self, direction: Direction, category: str | None) -> tuple[MiddlewareEntry, ...]:
        if category is None:
            return ()
        return tuple(
            e for e in self._entries if e.direction == direction and e.category == category
        )

    def __iter__(self) -> Iterator[MiddlewareEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
