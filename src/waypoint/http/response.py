"""Mutable HTTP response handed to output mappers.

Output mappers receive a fresh ``Response`` per request and write to it
with a chainable API::

    def created(data, response, next):
        response.set_status(201).set_header("Location", f"/users/{data['id']}").json(data)

A response can be written once. The ASGI host sends it after the route
handler returns.
"""

import json as json_module
from typing import Any

from waypoint.http.cookies import SetCookie


class Response:
    """An HTTP response under construction."""

    __slots__ = ("body", "content_type", "cookies", "headers", "sent", "status")

    def __init__(
        self,
        body: str | bytes = b"",
        *,
        status: int = 200,
        content_type: str = "text/plain; charset=utf-8",
    ) -> None:
        self.body: bytes = body.encode("utf-8") if isinstance(body, str) else body
        self.status: int = status
        self.content_type: str = content_type
        self.headers: list[tuple[str, str]] = []
        self.cookies: list[SetCookie] = []
        self.sent: bool = False

    def __repr__(self) -> str:
        return f"Response(status={self.status}, content_type={self.content_type!r}, sent={self.sent})"

    # -- Metadata --

    def set_status(self, status: int) -> "Response":
        """Set the status code."""
        self.status = status
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """Add a header. Repeated names are kept as separate headers."""
        self.headers.append((name, value))
        return self

    def get_header(self, name: str) -> str | None:
        """Return the first header value for *name* (case-insensitive)."""
        wanted = name.lower()
        return next((v for k, v in self.headers if k.lower() == wanted), None)

    def set_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> "Response":
        """Attach a ``Set-Cookie`` directive."""
        self.cookies.append(
            SetCookie(
                name=name,
                value=value,
                max_age=max_age,
                path=path,
                domain=domain,
                secure=secure,
                httponly=httponly,
                samesite=samesite,
            )
        )
        return self

    def delete_cookie(self, name: str, path: str = "/") -> "Response":
        """Expire a cookie on the client (``Max-Age=0``)."""
        self.cookies.append(SetCookie(name=name, value="", max_age=0, path=path))
        return self

    # -- Body --

    def send(self, body: str | bytes, content_type: str | None = None) -> None:
        """Write the body and mark the response as sent.

        Raises ``RuntimeError`` if the response was already written.
        """
        if self.sent:
            msg = "Response has already been sent."
            raise RuntimeError(msg)
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        if content_type is not None:
            self.content_type = content_type
        self.sent = True

    def json(self, data: Any) -> None:
        """Serialize *data* as the JSON body."""
        self.send(
            json_module.dumps(data, default=str),
            content_type="application/json",
        )

    def text(self, body: str) -> None:
        """Write a plain-text body."""
        self.send(body, content_type="text/plain; charset=utf-8")

    def redirect(self, url: str, status: int = 302) -> None:
        """Redirect the client to *url*."""
        self.set_status(status).set_header("Location", url).send(b"")

    def end(self) -> None:
        """Finish the response without a body."""
        self.send(b"")
