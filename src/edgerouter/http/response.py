"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. After-middleware receives a
response and returns one, usually built through these calls.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from edgerouter.http.headers import Headers

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    ``headers`` carries every header, ``Content-Type`` included.
    """

    body: bytes = b""
    status: int = 200
    status_text: str = ""
    headers: Headers = field(default_factory=Headers)

    # -- Chainable transformations --

    def with_status(self, status: int, status_text: str | None = None) -> Response:
        """Return a new Response with a different status (and optionally status text)."""
        if status_text is None:
            return replace(self, status=status)
        return replace(self, status=status, status_text=status_text)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with *name* set to *value*."""
        return replace(self, headers=self.headers.with_header(name, value))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with several headers set."""
        merged = self.headers
        for name, value in headers.items():
            merged = merged.with_header(name, value)
        return replace(self, headers=merged)

    def with_body(self, body: bytes | str) -> Response:
        """Return a new Response with a different body."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        return replace(self, body=body)

    def without_body(self) -> Response:
        """Return a new Response with an empty body; status and headers kept."""
        return replace(self, body=b"")

    # -- Body helpers --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Body parsed as JSON."""
        return json_module.loads(self.body)


def json_response(
    data: Any,
    status: int = 200,
    status_text: str = "",
    headers: Mapping[str, str] | tuple[tuple[str, str], ...] = (),
) -> Response:
    """Build a JSON response.

    ``Content-Type: application/json`` is set unless *headers* already
    carries a content type.
    """
    merged = Headers(headers)
    if "content-type" not in merged:
        merged = merged.with_header("Content-Type", JSON_CONTENT_TYPE)
    return Response(
        body=json_module.dumps(data, separators=(",", ":")).encode("utf-8"),
        status=status,
        status_text=status_text,
        headers=merged,
    )


def text_response(text: str | bytes, status: int = 200) -> Response:
    """Build a plain-text response."""
    body = text.encode("utf-8") if isinstance(text, str) else text
    return Response(
        body=body,
        status=status,
        headers=Headers({"Content-Type": "text/plain; charset=utf-8"}),
    )
