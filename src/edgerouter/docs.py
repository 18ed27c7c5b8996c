"""API documentation served on the reserved internal routes.

``build_openapi`` turns the route table into an OpenAPI 3.0 document;
``DOCS_PAGE`` is a Swagger UI page that loads it from ``/openapi.json``.
Nothing here runs unless internal routes are enabled.
"""

from typing import Any

from edgerouter.config import RouterConfig
from edgerouter.routing.descriptors import ParameterDescriptor
from edgerouter.routing.route import WILDCARD_METHOD, HandlerEntry
from edgerouter.routing.table import RESERVED_PATHS, RouteTable

OPENAPI_VERSION = "3.0.0"

DOCS_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Swagger UI</title>
    <script src="https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
    <link rel="stylesheet" href="https://unpkg.com/swagger-ui-dist@5/swagger-ui.css">
</head>
<body>
    <div id="swagger-ui"></div>
    <script>
        window.onload = function () {
            SwaggerUIBundle({ url: "/openapi.json", dom_id: "#swagger-ui" });
        };
    </script>
</body>
</html>
"""

_DETAIL_RESPONSE: dict[str, Any] = {
    "200": {
        "description": "Successful Response",
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {"detail": {"type": "string"}},
                },
            },
        },
    },
}


def _schema(descriptor: ParameterDescriptor) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": descriptor.type}
    if descriptor.content_type:
        schema["format"] = descriptor.content_type
    return schema


def _parameter(descriptor: ParameterDescriptor) -> dict[str, Any]:
    result: dict[str, Any] = {
        "in": descriptor.location,
        "name": descriptor.name,
        "required": not descriptor.optional,
        "schema": _schema(descriptor),
    }
    if descriptor.description:
        result["description"] = descriptor.description
    if descriptor.deprecated:
        result["deprecated"] = True
    return result


def _request_body(descriptor: ParameterDescriptor) -> dict[str, Any]:
    content_type = descriptor.content_type or "application/json"
    result: dict[str, Any] = {
        "required": not descriptor.optional,
        "content": {content_type: {"schema": {"type": descriptor.type}}},
    }
    if descriptor.description:
        result["description"] = descriptor.description
    return result


def _operation(entry: HandlerEntry) -> dict[str, Any]:
    meta = entry.metadata
    name = getattr(entry.handler, "__name__", "handler")
    operation: dict[str, Any] = {
        "tags": [meta.category],
        "summary": meta.summary or name.replace("_", " ").strip().capitalize(),
        "operationId": name,
        "parameters": [],
        "responses": _DETAIL_RESPONSE,
    }
    for descriptor in meta.descriptors:
        if not descriptor.documented:
            continue
        if descriptor.location == "body":
            operation["requestBody"] = _request_body(descriptor)
        else:
            operation["parameters"].append(_parameter(descriptor))
    if meta.deprecated:
        operation["deprecated"] = True
    return operation


def build_openapi(table: RouteTable, config: RouterConfig) -> dict[str, Any]:
    """Build an OpenAPI 3.0 document for every user route in *table*.

    The ``*`` route, ``*``-method handlers, the implicit ``OPTIONS``, and
    the reserved paths are left out.
    """
    paths: dict[str, dict[str, Any]] = {}
    for route in table.routes:
        if route.pattern.is_wildcard or route.path in RESERVED_PATHS:
            continue
        item = {
            method.lower(): _operation(entry)
            for method, entry in route.handlers.items()
            if method != WILDCARD_METHOD
        }
        if item:
            paths[route.path] = item

    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": config.title,
            "version": config.version,
            "description": config.description,
        },
        "paths": paths,
    }
