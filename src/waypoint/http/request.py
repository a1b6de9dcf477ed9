"""Immutable HTTP request.

Unlike a streaming request, the body is read and parsed once, before the
route handler runs, so input mappers can address it synchronously as
``body.<field>`` alongside ``params``, ``query``, ``headers`` and
``cookies``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from waypoint._internal.asgi import HTTPScope, Receive, Scope
from waypoint.errors import HTTPError
from waypoint.http.body import parse_body
from waypoint.http.cookies import parse_cookies
from waypoint.http.headers import Headers
from waypoint.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``params`` holds the path parameters of the matched route and is
    filled in by the router via ``with_params()``.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    params: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    raw_body: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    def with_params(self, params: Mapping[str, str]) -> "Request":
        """Return a copy carrying the matched route's path parameters."""
        return replace(self, params=dict(params))

    @classmethod
    async def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        *,
        max_content_length: int | None = None,
    ) -> "Request":
        """Create a Request from an ASGI scope, reading the whole body.

        Raises ``HTTPError(413)`` when the body exceeds
        *max_content_length* and ``HTTPError(400)`` when it cannot be
        parsed for its declared content type.
        """
        http = HTTPScope.from_scope(scope)
        headers = Headers.from_raw(http.headers)
        raw_body = await _read_body(receive, max_content_length)
        return cls(
            method=http.method,
            path=http.path,
            headers=headers,
            query=QueryParams(http.query_string),
            cookies=parse_cookies("; ".join(headers.get_list("cookie"))),
            body=parse_body(raw_body, headers.get("content-type")),
            raw_body=raw_body,
            http_version=http.http_version,
            server=http.server,
            client=http.client,
        )


async def _read_body(receive: Receive, limit: int | None) -> bytes:
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if limit is not None and size > limit:
                raise HTTPError(status=413, detail=f"Request body exceeds {limit} bytes")
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)
