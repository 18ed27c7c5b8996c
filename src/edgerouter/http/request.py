"""Immutable HTTP request.

Frozen metadata with async body access. Middleware that wants to change
a request returns a new one built with ``with_header()`` or
``dataclasses.replace()``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlsplit

from edgerouter.http.cookies import parse_cookies
from edgerouter.http.headers import Headers
from edgerouter.http.query import parse_query

type Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``url`` is absolute (scheme, host, path, query). The body is read
    once, either from bytes supplied at construction or from an ASGI
    receive callable, and cached.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)

    # Private: body source (bytes up front, or an ASGI receive callable)
    _body: bytes | None = field(default=None, repr=False)
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the body read through _receive
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def path(self) -> str:
        """The URL path, ``/`` when the URL has none."""
        return urlsplit(self.url).path or "/"

    @property
    def query_string(self) -> str:
        """The raw query string, without the ``?``."""
        return urlsplit(self.url).query

    @property
    def query(self) -> dict[str, str]:
        """Query parameters, last value wins."""
        return parse_query(self.query_string)

    @property
    def cookies(self) -> dict[str, str]:
        """Cookies from the ``Cookie`` header, first value wins."""
        return parse_cookies(self.headers.get("cookie"))

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    # -- Transformations --

    def with_header(self, name: str, value: str) -> Request:
        """Return a new Request with *name* set to *value*."""
        return replace(self, headers=self.headers.with_header(name, value))

    def with_url(self, url: str) -> Request:
        """Return a new Request pointing at *url*."""
        return replace(self, url=url)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached; the receive callable is consumed once.
        """
        if self._body is not None:
            return self._body
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            if self._body:
                yield self._body
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        raw = await self.body()
        return json_module.loads(raw)

    # -- Factories --

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> Request:
        """Create a Request from plain values.

        Usage::

            Request.build("GET", "https://example.com/user/alice?x=1")
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(
            method=method.upper(),
            url=url,
            headers=Headers(headers or {}),
            _body=body if body is not None else b"",
        )

    @classmethod
    def from_asgi(cls, scope: MutableMapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        headers = Headers.from_raw(scope.get("headers", ()))
        scheme = scope.get("scheme", "http")
        host = headers.get("host")
        if host is None:
            server = scope.get("server")
            host = f"{server[0]}:{server[1]}" if server else "localhost"
        url = f"{scheme}://{host}{scope.get('root_path', '')}{scope['path']}"
        query = scope.get("query_string", b"")
        if query:
            url = f"{url}?{query.decode('latin-1')}"
        return cls(method=scope["method"], url=url, headers=headers, _receive=receive)
