"""Dispatcher — the request pipeline and its error translation.

    MATCHED -> METHOD_CHECKED -> BEFORE_MW -> BOUND -> INVOKED -> AFTER_MW -> FINALIZED
                              \\___________________ ERROR _________________/

Each stage yields either its product or a ``StructuredError``. The first
failure jumps to ERROR, which renders ``{"detail": message}`` and runs
the error-category middleware once. If one of those fails, the response
is a bare 500 and no further middleware runs.

The route table and middleware registry are only read here; every
request carries its own state.
"""

import inspect
import logging
from enum import Enum
from typing import Any

from edgerouter.binding import bind
from edgerouter.config import RouterConfig
from edgerouter.errors import ClientError, StructuredError
from edgerouter.http.request import Request
from edgerouter.http.response import Response, json_response, text_response
from edgerouter.http.status import STATUS_MESSAGES
from edgerouter.middleware.registry import MiddlewareEntry, MiddlewareRegistry
from edgerouter.routing.route import WILDCARD_METHOD, HandlerEntry
from edgerouter.routing.table import RouteTable

logger = logging.getLogger("edgerouter.dispatch")


class Stage(Enum):
    """Pipeline states, used in log records."""

    MATCHED = "matched"
    METHOD_CHECKED = "method_checked"
    BEFORE_MW = "before_middleware"
    BOUND = "bound"
    INVOKED = "invoked"
    AFTER_MW = "after_middleware"
    FINALIZED = "finalized"
    ERROR = "error"


async def call(fn: Any, *args: Any) -> Any:
    """Call a sync or async callable and await the result if needed."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def negotiate(result: Any, default_headers: tuple[tuple[str, str], ...] = ()) -> Response:
    """Convert a handler's return value to a Response.

    Response -> as-is; dict/list -> JSON; str/bytes -> text; None -> 204.
    """
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status=204)
    if isinstance(result, (dict, list)):
        return json_response(result, headers=default_headers)
    if isinstance(result, (str, bytes)):
        return text_response(result)
    msg = f"Handler returned unsupported type {type(result).__name__!r}"
    raise TypeError(msg)


def bare_error() -> Response:
    """The double-fault response: a 500 no middleware touches."""
    message = STATUS_MESSAGES[500]
    return json_response({"detail": message}, 500, message)


def options_response(allowed: frozenset[str]) -> Response:
    """Answer an OPTIONS request with the path's allowed methods."""
    methods = sorted(allowed)
    return json_response(
        {"allowed_methods": methods},
        headers={"Access-Control-Allow-Methods": ", ".join(methods)},
    )


def _name(fn: Any) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


class Dispatcher:
    """Runs one request through match, middleware, binding, and the handler.

    Usage::

        dispatcher = Dispatcher(table, registry, RouterConfig())
        response = await dispatcher.dispatch(request)
    """

    __slots__ = ("config", "middleware", "table")

    def __init__(
        self,
        table: RouteTable,
        middleware: MiddlewareRegistry,
        config: RouterConfig | None = None,
    ) -> None:
        self.table = table
        self.middleware = middleware
        self.config = config or RouterConfig()

    async def dispatch(self, request: Request) -> Response:
        """Process a request into a response.

        Errors become JSON error responses, except handler errors when
        ``handle_errors`` is off, which propagate.
        """
        response = await self._run(request)
        # FINALIZED: HEAD keeps status and headers, drops the body
        if request.method.upper() == "HEAD":
            response = response.without_body()
        return response

    async def _run(self, request: Request) -> Response:
        method = request.method.upper()
        path = request.path

        if method == "TRACE" and self.config.enable_trace:
            return await self._trace(request)

        match = self.table.lookup(method, path)
        logger.debug(
            "%s %s matched %s [%s]",
            method,
            path,
            match.route.path if match.route is not None else None,
            match.category,
        )

        if method == "OPTIONS":
            return options_response(match.allowed_methods)

        if (
            match.route is not None
            and not match.fallback
            and method != "HEAD"
            and method not in match.allowed_methods
            and WILDCARD_METHOD not in match.allowed_methods
        ):
            return await self._fail(request, Stage.METHOD_CHECKED, StructuredError.of(405))

        entry = match.entry
        if entry is None:
            return await self._fail(request, Stage.MATCHED, StructuredError.of(404))

        before = await self._run_before(request, entry.category)
        if isinstance(before, StructuredError):
            return await self._fail(request, Stage.BEFORE_MW, before)
        request = before

        args = await bind(request, entry.metadata, match.path_params)
        if isinstance(args, StructuredError):
            return await self._fail(request, Stage.BOUND, args)

        result = await self._invoke(entry, args)
        if isinstance(result, StructuredError):
            return await self._fail(request, Stage.INVOKED, result)

        after = await self._run_after(result, entry.category)
        if isinstance(after, StructuredError):
            return await self._fail(request, Stage.AFTER_MW, after)
        return after

    async def _run_before(self, request: Request, category: str) -> Request | StructuredError:
        for mw in self.middleware.before(category):
            outcome = await self._apply(mw, request, Request)
            if isinstance(outcome, StructuredError):
                return outcome
            request = outcome
        return request

    async def _run_after(self, response: Response, category: str) -> Response | StructuredError:
        for mw in self.middleware.after(category):
            outcome = await self._apply(mw, response, Response)
            if isinstance(outcome, StructuredError):
                return outcome
            response = outcome
        return response

    async def _apply(self, mw: MiddlewareEntry, value: Any, expected: type) -> Any:
        """Run one middleware; a ClientError keeps its status, anything else is a 500."""
        try:
            result = await call(mw.fn, value)
        except ClientError as exc:
            return exc.structured
        except Exception:
            logger.exception("%s middleware %s failed", mw.direction, _name(mw.fn))
            return StructuredError.of(500)
        if not isinstance(result, expected):
            logger.error(
                "%s middleware %s returned %s, expected %s",
                mw.direction,
                _name(mw.fn),
                type(result).__name__,
                expected.__name__,
            )
            return StructuredError.of(500)
        return result

    async def _invoke(self, entry: HandlerEntry, args: list[Any]) -> Response | StructuredError:
        try:
            result = await call(entry.handler, *args)
            return negotiate(result, self.config.default_headers)
        except ClientError as exc:
            return exc.structured
        except Exception:
            if not self.config.handle_errors:
                raise
            logger.exception("handler %s failed", _name(entry.handler))
            return StructuredError.of(500)

    async def _fail(self, request: Request, stage: Stage, failure: StructuredError) -> Response:
        logger.debug(
            "%s %s: %s -> %s %d %s",
            request.method,
            request.path,
            stage.value,
            Stage.ERROR.value,
            failure.status_code,
            failure.status_message,
        )
        return await self.error_response(failure)

    async def error_response(self, failure: StructuredError) -> Response:
        """Render *failure* as JSON and run the error middleware over it.

        The first error middleware that fails ends the chain with a bare 500.
        """
        response = json_response(
            {"detail": failure.status_message},
            failure.status_code,
            failure.status_message,
        )
        for mw in self.middleware.errors():
            try:
                result = await call(mw.fn, response)
            except Exception:
                logger.exception("error middleware %s failed", _name(mw.fn))
                return bare_error()
            if not isinstance(result, Response):
                logger.error(
                    "error middleware %s returned %s, expected Response",
                    _name(mw.fn),
                    type(result).__name__,
                )
                return bare_error()
            response = result
        return response

    async def _trace(self, request: Request) -> Response:
        return json_response(
            {
                "body": (await request.body()).decode("utf-8", "replace"),
                "method": request.method,
                "url": request.url,
                "headers": dict(request.headers),
            }
        )
