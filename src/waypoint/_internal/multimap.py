"""Read-only multi-valued string mapping shared by Headers and QueryParams.

``__getitem__`` returns the first value for a key, ``get_list`` all of
them. Subclasses normalize keys by overriding ``_key``.
"""

from collections.abc import Iterable, Iterator, Mapping


class MultiValueMap(Mapping[str, str]):
    """An immutable ordered list of ``(key, value)`` pairs."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(self, "_items", tuple((self._key(k), v) for k, v in items))

    @staticmethod
    def _key(key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        wanted = self._key(key)
        for name, value in self._items:
            if name == wanted:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        wanted = self._key(key)
        return any(name == wanted for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._items))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._items))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in arrival order."""
        wanted = self._key(key)
        return [value for name, value in self._items if name == wanted]

    def items_list(self) -> list[tuple[str, str]]:
        """Return every pair, duplicates included."""
        return list(self._items)
