"""Immutable, case-insensitive HTTP headers."""

from waypoint._internal.multimap import MultiValueMap


class Headers(MultiValueMap):
    """Request headers keyed by lower-cased name.

    ``headers["Content-Type"]`` and ``headers["content-type"]`` are the
    same lookup. ``get_list`` returns repeated headers such as ``Cookie``.
    """

    __slots__ = ()

    @staticmethod
    def _key(key: str) -> str:
        return key.lower()

    @classmethod
    def from_raw(cls, raw: tuple[tuple[bytes, bytes], ...]) -> "Headers":
        """Decode ASGI header byte pairs (latin-1, as HTTP requires)."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)
