"""Route, HandlerEntry, and MatchResult dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from edgerouter.routing.descriptors import HandlerMetadata
from edgerouter.routing.pattern import PathPattern

WILDCARD_METHOD = "*"


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """One handler registered for one (path, method) pair."""

    method: str
    handler: Callable[..., Any]
    metadata: HandlerMetadata

    @property
    def category(self) -> str:
        return self.metadata.category

    @property
    def deprecated(self) -> bool:
        return self.metadata.deprecated


@dataclass(slots=True)
class Route:
    """A path pattern and its per-method handlers.

    Extended by registration calls; read-only once the router freezes.
    ``methods`` always contains ``OPTIONS``.
    """

    pattern: PathPattern
    handlers: dict[str, HandlerEntry] = field(default_factory=dict)
    methods: set[str] = field(default_factory=lambda: {"OPTIONS"})

    @property
    def path(self) -> str:
        """The display form of the pattern, e.g. ``/user/{name}``."""
        return self.pattern.display

    def entry_for(self, method: str) -> HandlerEntry | None:
        """Exact-method handler, with HEAD falling back to GET."""
        entry = self.handlers.get(method)
        if entry is None and method == "HEAD":
            entry = self.handlers.get("GET")
        return entry


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Result of a route table lookup. Transient, one per request.

    ``entry`` is ``None`` when no handler resolves; the dispatcher then
    answers with the built-in 404. ``fallback`` is True when only the
    all-paths ``*`` route matched.
    """

    route: Route | None
    entry: HandlerEntry | None
    path_params: dict[str, str]
    allowed_methods: frozenset[str]
    fallback: bool = False

    @property
    def category(self) -> str | None:
        """Category of the resolved handler, ``None`` for the built-in 404."""
        return self.entry.category if self.entry is not None else None
