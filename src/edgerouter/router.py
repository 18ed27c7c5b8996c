"""EdgeRouter — the public registration and dispatch surface.

Mutable during setup (routes, middleware). Frozen on the first dispatch
or an explicit ``freeze()``.
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import anyio

from edgerouter.config import RouterConfig
from edgerouter.dispatcher import Dispatcher
from edgerouter.docs import DOCS_PAGE, build_openapi
from edgerouter.errors import StructuredError
from edgerouter.http.headers import Headers
from edgerouter.http.request import Receive, Request
from edgerouter.http.response import Response, json_response
from edgerouter.middleware.registry import MiddlewareRegistry
from edgerouter.routing.descriptors import DEFAULT_CATEGORY, ParameterDescriptor
from edgerouter.routing.route import WILDCARD_METHOD, Route
from edgerouter.routing.table import RouteTable
from edgerouter.server.asgi import Scope, Send, handle_http, handle_lifespan

type Handler = Callable[..., Any]

INTERNAL_CATEGORY = "internal"


class EdgeRouter:
    """A request router for serverless and edge hosts.

    Usage::

        router = EdgeRouter()

        async def get_user(name):
            \"""@param where:path type:string name:name\"""
            return {"name": name}

        router.get("/user/:name", get_user)
        response = await router.dispatch(Request.build("GET", "https://x/user/alice"))

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock and a
        double check so exactly one thread compiles the route table, even
        when several host workers dispatch their first request at once.
    """

    __slots__ = (
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_table",
        "config",
    )

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._table = RouteTable(internal_routes=self.config.internal_routes)
        self._middleware = MiddlewareRegistry()
        self._dispatcher = Dispatcher(self._table, self._middleware, self.config)
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Route registration --

    def add_route(
        self,
        path: str,
        method: str,
        handler: Handler,
        *,
        params: Iterable[ParameterDescriptor] = (),
        category: str | None = None,
        deprecated: bool | None = None,
        bypass_reserved: bool = False,
    ) -> Route:
        """Register *handler* for *method* on *path*.

        Args:
            path: Path template. ``:name`` segments are placeholders;
                ``*`` matches every path no other route matches.
            method: HTTP method, or ``*`` for any method.
            handler: Sync or async callable. Its parameters are bound by
                name from the request as its descriptors say.
            params: Explicit descriptors; they override docstring tags.
            category: Middleware category; overrides ``@category``.
            deprecated: Overrides ``@deprecated``.
            bypass_reserved: Allow ``/docs`` and ``/openapi.json`` while
                internal routes are disabled.
        """
        self._check_not_frozen()
        return self._table.register(
            path,
            method,
            handler,
            params,
            category,
            deprecated,
            bypass_reserved=bypass_reserved,
        )

    def custom(self, method: str, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        """Register *handler* for an arbitrary method. Returns the router."""
        self.add_route(path, method.upper(), handler, **options)
        return self

    def get(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("GET", path, handler, **options)

    def post(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("POST", path, handler, **options)

    def put(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("PUT", path, handler, **options)

    def patch(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("PATCH", path, handler, **options)

    def delete(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("DELETE", path, handler, **options)

    def head(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("HEAD", path, handler, **options)

    def connect(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        return self.custom("CONNECT", path, handler, **options)

    def all(self, path: str, handler: Handler, **options: Any) -> EdgeRouter:
        """Register *handler* for every method on *path*."""
        return self.custom(WILDCARD_METHOD, path, handler, **options)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        params: Iterable[ParameterDescriptor] = (),
        category: str | None = None,
        deprecated: bool | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        ``methods`` defaults to ``["GET"]``.
        """
        params = tuple(params)

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.add_route(
                    path,
                    method,
                    func,
                    params=params,
                    category=category,
                    deprecated=deprecated,
                )
            return func

        return decorator

    def json(
        self,
        method: str,
        path: str,
        data: Any,
        code: int = 200,
        status_text: str = "",
    ) -> EdgeRouter:
        """Register a route that always answers with *data* as JSON."""
        headers = self.config.default_headers

        async def json_route() -> Response:
            return json_response(data, code, status_text, headers)

        return self.custom(method, path, json_route)

    def error_response(
        self, code: int = 500, message: str = ""
    ) -> Callable[..., Awaitable[Response]]:
        """Return a handler that answers with a JSON error.

        The error middleware runs on the result. Raises ``ValueError`` now
        for a code without a default message.
        """
        failure = StructuredError.of(code, message)
        dispatcher = self._dispatcher

        async def error_route() -> Response:
            return await dispatcher.error_response(failure)

        return error_route

    # -- Middleware --

    def use(self, middleware: Callable[..., Any], category: str = DEFAULT_CATEGORY) -> EdgeRouter:
        """Add a middleware under *category*. Returns the router.

        ``request`` middleware runs before handlers of that category,
        ``response`` middleware after them; ``response`` middleware in the
        ``error`` category runs on every error response.
        """
        self._check_not_frozen()
        self._middleware.use(middleware, category)
        return self

    # -- Introspection --

    def allowed_methods(self, path: str) -> list[str]:
        """Sorted methods registered for the pattern matching *path*."""
        return sorted(self._table.allowed_methods(path))

    @property
    def routes(self) -> list[Route]:
        return self._table.routes

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response:
        """Route *request* through middleware and its handler."""
        self._ensure_frozen()
        return await self._dispatcher.dispatch(request)

    def dispatch_sync(self, request: Request) -> Response:
        """Dispatch from synchronous code on a fresh event loop."""
        return anyio.run(self.dispatch, request)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            self._ensure_frozen()
            await handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return
        await handle_http(scope, receive, send, dispatch=self.dispatch)

    # -- Internal --

    def freeze(self) -> None:
        """Compile the route table now. Later registrations raise RuntimeError."""
        self._ensure_frozen()

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """MUST only be called while holding _freeze_lock."""
        if self.config.internal_routes:
            self._register_internal_routes()
        self._table.compile()
        self._frozen = True

    def _register_internal_routes(self) -> None:
        table = self._table
        config = self.config

        async def openapi() -> Response:
            return json_response(build_openapi(table, config))

        async def docs() -> Response:
            return Response(
                body=DOCS_PAGE.encode("utf-8"),
                headers=Headers({"Content-Type": "text/html; charset=utf-8"}),
            )

        table.register(
            "/openapi.json", "GET", openapi, category=INTERNAL_CATEGORY, bypass_reserved=True
        )
        table.register("/docs", "GET", docs, category=INTERNAL_CATEGORY, bypass_reserved=True)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the router after it has started dispatching requests. "
                "Register routes and middleware before the first dispatch."
            )
            raise RuntimeError(msg)
