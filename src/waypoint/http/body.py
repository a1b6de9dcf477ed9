"""Request body parsing.

Turns raw body bytes into the plain data that input mappers address as
``body.<field>``:

- ``application/json`` (and ``+json`` suffixes): decoded JSON value
- ``application/x-www-form-urlencoded``: dict of fields (stdlib)
- ``multipart/form-data``: dict of fields and ``UploadFile`` objects
  (``python-multipart``)

Repeated form fields become lists. Other content types yield ``None``;
the raw bytes stay available as ``request.raw_body``.
"""

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.multipart import MultipartParser, parse_options_header

from waypoint.errors import HTTPError


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission.

    Content is held in memory, which suits typical API uploads.
    """

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


def _store(fields: dict[str, Any], name: str, value: Any) -> None:
    if name not in fields:
        fields[name] = value
    elif isinstance(fields[name], list):
        fields[name].append(value)
    else:
        fields[name] = [fields[name], value]


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def parse_body(raw: bytes, content_type: str | None) -> Any:
    """Parse *raw* according to *content_type*.

    Raises ``HTTPError(400)`` for malformed JSON, form, or multipart bodies.
    """
    if not raw or not content_type:
        return None

    media_type = _media_type(content_type)

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise HTTPError(status=400, detail=f"Malformed JSON body: {exc}") from exc

    if media_type == "application/x-www-form-urlencoded":
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HTTPError(status=400, detail=f"Malformed form body: {exc}") from exc
        fields: dict[str, Any] = {}
        for name, value in parse_qsl(text, keep_blank_values=True):
            _store(fields, name, value)
        return fields

    if media_type == "multipart/form-data":
        return _parse_multipart(raw, content_type)

    return None


def _parse_multipart(raw: bytes, content_type: str) -> dict[str, Any]:
    """Parse a multipart body with python-multipart's streaming parser."""
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        raise HTTPError(status=400, detail="Multipart body missing boundary parameter")

    fields: dict[str, Any] = {}
    part_headers: dict[str, str] = {}
    part_data = bytearray()
    header_field = bytearray()
    header_value = bytearray()

    def on_part_begin() -> None:
        part_headers.clear()
        part_data.clear()

    def on_header_field(data: bytes, start: int, end: int) -> None:
        header_field.extend(data[start:end])

    def on_header_value(data: bytes, start: int, end: int) -> None:
        header_value.extend(data[start:end])

    def on_header_end() -> None:
        part_headers[header_field.decode("latin-1").lower()] = header_value.decode("latin-1")
        header_field.clear()
        header_value.clear()

    def on_part_data(data: bytes, start: int, end: int) -> None:
        part_data.extend(data[start:end])

    def on_part_end() -> None:
        _, params = parse_options_header(part_headers.get("content-disposition", ""))
        name = params.get(b"name")
        if name is None:
            return
        filename = params.get(b"filename")
        if filename is not None:
            value: Any = UploadFile(
                filename=filename.decode("utf-8"),
                content_type=part_headers.get("content-type", "application/octet-stream"),
                content=bytes(part_data),
            )
        else:
            value = part_data.decode("utf-8", errors="replace")
        _store(fields, name.decode("utf-8"), value)

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
        },
    )
    try:
        parser.write(raw)
        parser.finalize()
    except ValueError as exc:
        raise HTTPError(status=400, detail=f"Malformed multipart body: {exc}") from exc
    return fields
