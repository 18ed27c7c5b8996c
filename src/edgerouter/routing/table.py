"""Route table — compiled patterns, per-method handlers, allowed methods.

Routes are registered during setup and compiled (frozen) before the
first dispatch. Lookup walks patterns in registration order; the
all-paths ``*`` route is consulted only when no other pattern matches.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from edgerouter.errors import DescriptorMismatchError, ReservedPathError
from edgerouter.routing.descriptors import ParameterDescriptor, describe_handler
from edgerouter.routing.pattern import PathPattern, compile_pattern
from edgerouter.routing.route import WILDCARD_METHOD, HandlerEntry, MatchResult, Route

logger = logging.getLogger("edgerouter.routing")

RESERVED_PATHS: frozenset[str] = frozenset({"/docs", "/openapi.json"})


class RouteTable:
    """Ordered route table.

    Usage::

        table = RouteTable()
        table.register("/user/:name", "GET", get_user)
        table.compile()
        match = table.lookup("GET", "/user/alice")
    """

    __slots__ = ("_compiled", "_fallback", "_routes", "internal_routes")

    def __init__(self, *, internal_routes: bool = True) -> None:
        self.internal_routes = internal_routes
        # Display path -> Route, in registration order
        self._routes: dict[str, Route] = {}
        # The all-paths "*" route
        self._fallback: Route | None = None
        self._compiled = False

    def register(
        self,
        path: str,
        method: str,
        handler: Callable[..., Any],
        descriptors: Iterable[ParameterDescriptor] = (),
        category: str | None = None,
        deprecated: bool | None = None,
        *,
        bypass_reserved: bool = False,
    ) -> Route:
        """Register *handler* for (*path*, *method*).

        Re-registering a pair replaces that method's handler only.

        Raises ``ReservedPathError`` for ``/docs`` and ``/openapi.json``
        while internal routes are disabled (unless *bypass_reserved*),
        ``DescriptorMismatchError`` when placeholders and ``path``
        descriptors disagree, and the extractor's errors for malformed
        metadata.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if path in RESERVED_PATHS and not self.internal_routes and not bypass_reserved:
            msg = (
                f"The path {path!r} is reserved for internal use. "
                "Please use a different path or enable internal routes."
            )
            raise ReservedPathError(msg)

        pattern = compile_pattern(path)
        metadata = describe_handler(
            handler, params=descriptors, category=category, deprecated=deprecated
        )
        _check_path_descriptors(pattern, metadata.descriptors, handler)

        route = self._route_for(pattern)
        method = method.upper()
        route.handlers[method] = HandlerEntry(method=method, handler=handler, metadata=metadata)
        route.methods.add(method)

        logger.debug(
            "registered %s %s -> %s [%s]",
            method,
            pattern.display,
            getattr(handler, "__name__", repr(handler)),
            metadata.category,
        )
        return route

    def _route_for(self, pattern: PathPattern) -> Route:
        if pattern.is_wildcard:
            if self._fallback is None:
                self._fallback = Route(pattern=pattern)
            return self._fallback
        route = self._routes.get(pattern.display)
        if route is None:
            route = Route(pattern=pattern)
            self._routes[pattern.display] = route
        return route

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """All routes in registration order, the ``*`` route last."""
        result = list(self._routes.values())
        if self._fallback is not None:
            result.append(self._fallback)
        return result

    def lookup(self, method: str, path: str) -> MatchResult:
        """Match *path* and resolve the handler for *method*.

        Resolution within the matched path: exact method (HEAD falls back
        to GET), then the path's ``*`` method, then the ``*`` route's exact
        method, then its ``*`` method. ``entry`` is ``None`` when none
        apply; ``route`` is ``None`` when no pattern matches at all.
        """
        method = method.upper()
        for route in self._routes.values():
            params = route.pattern.match(path)
            if params is None:
                continue
            entry = (
                route.entry_for(method)
                or route.handlers.get(WILDCARD_METHOD)
                or self._fallback_entry(method)
            )
            return MatchResult(
                route=route,
                entry=entry,
                path_params=params,
                allowed_methods=frozenset(route.methods),
            )

        if self._fallback is not None:
            return MatchResult(
                route=self._fallback,
                entry=self._fallback_entry(method),
                path_params={},
                allowed_methods=frozenset(self._fallback.methods),
                fallback=True,
            )

        return MatchResult(route=None, entry=None, path_params={}, allowed_methods=frozenset())

    def _fallback_entry(self, method: str) -> HandlerEntry | None:
        if self._fallback is None:
            return None
        return self._fallback.entry_for(method) or self._fallback.handlers.get(WILDCARD_METHOD)

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Methods registered for the first pattern matching *path*.

        Empty when nothing matches.
        """
        return self.lookup("OPTIONS", path).allowed_methods


def _check_path_descriptors(
    pattern: PathPattern,
    descriptors: tuple[ParameterDescriptor, ...],
    handler: Callable[..., Any],
) -> None:
    """Every placeholder needs a required ``path`` descriptor and vice versa."""
    name = getattr(handler, "__name__", repr(handler))
    by_name = {d.name: d for d in descriptors}

    for placeholder in pattern.params:
        descriptor = by_name.get(placeholder)
        if descriptor is None or not descriptor.documented:
            msg = (
                f"The path variable {placeholder!r} in {pattern.template!r} does not have "
                f"a parameter descriptor in the handler function {name!r}."
            )
            raise DescriptorMismatchError(msg)
        if descriptor.location != "path":
            msg = (
                f"The path variable {placeholder!r} in {pattern.template!r} has its location "
                f"set to {descriptor.location!r} instead of 'path' in the handler function {name!r}."
            )
            raise DescriptorMismatchError(msg)
        if descriptor.optional:
            msg = (
                f"The path variable {placeholder!r} in {pattern.template!r} is marked optional "
                f"in the handler function {name!r}; path parameters are always required."
            )
            raise DescriptorMismatchError(msg)

    for descriptor in descriptors:
        if descriptor.location == "path" and descriptor.name not in pattern.params:
            msg = (
                f"Parameter {descriptor.name!r} of handler {name!r} is located in the path, "
                f"but {pattern.template!r} has no such placeholder."
            )
            raise DescriptorMismatchError(msg)
