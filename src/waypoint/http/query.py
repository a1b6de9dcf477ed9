"""Immutable query string parameters."""

from urllib.parse import parse_qsl

from waypoint._internal.multimap import MultiValueMap


class QueryParams(MultiValueMap):
    """Parsed query string.

    ``query["page"]`` is the first ``page`` value; ``get_list("tag")``
    returns all of them. Blank values are kept.
    """

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes | str = b"") -> None:
        raw = query_string.encode("latin-1") if isinstance(query_string, str) else query_string
        object.__setattr__(self, "_raw", raw)
        super().__init__(parse_qsl(raw.decode("latin-1"), keep_blank_values=True))

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
