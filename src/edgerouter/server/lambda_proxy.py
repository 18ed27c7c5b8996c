"""AWS API Gateway / Lambda proxy integration.

``lambda_handler(router)`` returns the synchronous ``handler(event,
context)`` a Lambda runtime calls. Both proxy payload versions are
understood::

    router = EdgeRouter()
    router.get("/ping", ping)
    handler = lambda_handler(router)
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

import anyio

from edgerouter.http.headers import Headers
from edgerouter.http.request import Request
from edgerouter.http.response import Response

if TYPE_CHECKING:
    from edgerouter.router import EdgeRouter

logger = logging.getLogger("edgerouter.server")

type LambdaHandler = Callable[[Mapping[str, Any], Any], dict[str, Any]]

# Content types returned as text; everything else is base64 encoded
_TEXT_TYPES = ("text/", "application/json", "application/xml", "application/javascript")


def _query_string(event: Mapping[str, Any]) -> str:
    if "rawQueryString" in event:
        return event["rawQueryString"] or ""
    params = event.get("queryStringParameters") or {}
    return urlencode(params, quote_via=quote)


def _headers(event: Mapping[str, Any]) -> list[tuple[str, str]]:
    pairs = [(name, str(value)) for name, value in (event.get("headers") or {}).items()]
    # v2 payloads move cookies out of the headers
    cookies = event.get("cookies")
    if cookies:
        pairs.append(("cookie", "; ".join(cookies)))
    return pairs


def request_from_event(event: Mapping[str, Any]) -> Request:
    """Build a Request from an API Gateway proxy event (payload v1 or v2)."""
    context = event.get("requestContext") or {}
    http = context.get("http") or {}

    method = http.get("method") or event.get("httpMethod") or "GET"
    path = event.get("rawPath") or http.get("path") or event.get("path") or "/"
    headers = _headers(event)
    host = next((v for k, v in headers if k.lower() == "host"), None)
    host = host or context.get("domainName") or "localhost"
    proto = next((v for k, v in headers if k.lower() == "x-forwarded-proto"), "https")

    url = f"{proto}://{host}{path}"
    query = _query_string(event)
    if query:
        url = f"{url}?{query}"

    body = event.get("body") or ""
    raw = base64.b64decode(body) if event.get("isBase64Encoded") else body.encode("utf-8")

    return Request(method=method.upper(), url=url, headers=Headers(headers), _body=raw)


def _is_text(response: Response) -> bool:
    content_type = response.content_type or ""
    return not response.body or content_type.startswith(_TEXT_TYPES)


def response_to_result(response: Response) -> dict[str, Any]:
    """Convert a Response into the proxy integration result shape."""
    if _is_text(response):
        body, encoded = response.body.decode("utf-8", "replace"), False
    else:
        body, encoded = base64.b64encode(response.body).decode("ascii"), True
    return {
        "statusCode": response.status,
        "headers": dict(response.headers.pairs),
        "body": body,
        "isBase64Encoded": encoded,
    }


def lambda_handler(router: EdgeRouter) -> LambdaHandler:
    """Wrap *router* as a Lambda proxy handler.

    Each invocation runs the dispatch to completion on a fresh event loop.
    """

    def handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
        request = request_from_event(event)
        logger.debug("lambda %s %s", request.method, request.path)
        response = anyio.run(router.dispatch, request)
        return response_to_result(response)

    return handler
