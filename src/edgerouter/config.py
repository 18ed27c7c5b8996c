"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, no
string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(handle_errors=False, internal_routes=False)
    """

    # Errors thrown by handlers become a logged, opaque 500.
    # When False they propagate to the caller of dispatch().
    handle_errors: bool = True

    # Serve /docs and /openapi.json
    internal_routes: bool = True

    # Echo TRACE requests back as JSON (not for production)
    enable_trace: bool = False

    # Headers on JSON shortcut routes and JSON-converted handler results
    default_headers: tuple[tuple[str, str], ...] = (
        ("Access-Control-Allow-Origin", "*"),
        ("Content-Type", "application/json"),
        ("Accept-Charset", "utf-8"),
    )

    # Documentation
    title: str = "Edgerouter"
    version: str = "1.0.0"
    description: str = "An edgerouter API"
