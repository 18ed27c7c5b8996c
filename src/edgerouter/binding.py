"""Argument binding — resolve a handler's parameters from a request.

Parameters are bound in declared order:

1. A name captured by the path pattern is read from the path
   (regardless of the descriptor's location), typed by the descriptor.
2. A documented parameter is read from its location (query, header,
   cookie, or body).
3. A parameter named ``request`` receives the request itself.
4. Anything else is bound to ``None``.

Values arrive as strings and are coerced to the descriptor's type.
Every failure is a ``ClientError``; ``bind()`` returns it as a
``StructuredError`` value rather than raising.
"""

import json
import logging
import math
from typing import Any
from urllib.parse import unquote

from edgerouter.errors import ClientError, StructuredError
from edgerouter.http.cookies import get_cookie
from edgerouter.http.request import Request
from edgerouter.routing.descriptors import HandlerMetadata, ParameterDescriptor

logger = logging.getLogger("edgerouter.dispatch")

REQUEST_PARAMETER = "request"

_TRUE = frozenset({"true", "t", "1"})
_FALSE = frozenset({"false", "f", "0"})

# How a missing value is named in "Missing required ..." messages
_MISSING_KIND: dict[str, str] = {
    "path": "path parameter",
    "query": "query parameter",
    "header": "header",
    "cookie": "cookie",
    "body": "body",
}


async def bind(
    request: Request,
    metadata: HandlerMetadata,
    path_params: dict[str, str],
) -> list[Any] | StructuredError:
    """Build the positional argument list for a handler.

    Returns the arguments, or the first binding failure.
    """
    args: list[Any] = []
    try:
        for name in metadata.parameters:
            args.append(await _bind_one(request, name, metadata.descriptor(name), path_params))
    except ClientError as exc:
        return exc.structured
    return args


async def _bind_one(
    request: Request,
    name: str,
    descriptor: ParameterDescriptor | None,
    path_params: dict[str, str],
) -> Any:
    if name in path_params:
        data_type = descriptor.type if descriptor is not None else "string"
        return coerce(name, path_params[name], data_type, location="path")

    if descriptor is not None and descriptor.documented and name != REQUEST_PARAMETER:
        raw = await read_raw(request, descriptor)
        return coerce(
            name,
            raw,
            descriptor.type,
            location=descriptor.location or "query",
            optional=descriptor.optional,
        )

    if name == REQUEST_PARAMETER:
        return request

    logger.warning("Argument %r is declared by the handler but not documented; binding None", name)
    return None


async def read_raw(request: Request, descriptor: ParameterDescriptor) -> str | None:
    """Read the raw string for *descriptor* from its location."""
    match descriptor.location:
        case "query":
            return request.query.get(descriptor.name)
        case "header":
            return request.headers.get(descriptor.name)
        case "cookie":
            return get_cookie(request.headers.get("cookie"), descriptor.name)
        case "body":
            raw = await request.body()
            return raw.decode("utf-8", errors="replace") if raw else None
    return None


def coerce(
    name: str,
    raw: str | None,
    data_type: str,
    *,
    location: str,
    optional: bool = False,
) -> Any:
    """Coerce a raw string to *data_type*.

    A missing (absent or empty) value is ``None`` when *optional*, and a
    400 otherwise. Raises ``ClientError`` for values of the wrong shape.
    """
    if raw is None or raw == "":
        if optional:
            return None
        msg = f"Missing required {_MISSING_KIND.get(location, location)} {name}!"
        raise ClientError(msg, 400)

    match data_type:
        case "number":
            return _to_number(name, raw)
        case "boolean":
            return _to_boolean(name, raw)
        case "object":
            text = raw if location == "body" else unquote(raw)
            try:
                return json.loads(text)
            except json.JSONDecodeError as exc:
                msg = f"Invalid JSON for {name}! {exc.msg}"
                raise ClientError(msg) from exc
    return raw


def _to_number(name: str, raw: str) -> int | float:
    value: int | float = math.nan
    if "_" not in raw:
        try:
            value = int(raw)
        except ValueError:
            try:
                value = float(raw)
            except ValueError:
                pass
    if isinstance(value, float) and not math.isfinite(value):
        msg = f"Invalid data type for {name}! Should be 'number'!"
        raise ClientError(msg)
    return value


def _to_boolean(name: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"Invalid data type for {name}! Should be 'boolean'!"
    raise ClientError(msg)
