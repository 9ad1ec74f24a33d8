"""Case-insensitive HTTP headers.

``Headers`` is the read-only view over the raw ASGI byte pairs of a
request. ``MutableHeaders`` backs the response sink, where ``set``
replaces any existing value for the name.
"""

from collections.abc import Iterator, Mapping


def _key(name: str) -> bytes:
    return name.lower().encode("latin-1")


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    Built once from the ASGI pairs; a repeated name resolves to its first
    value, which is all the core reads (``Content-Type``, ``Content-Length``).
    """

    __slots__ = ("_first",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        first: dict[str, str] = {}
        for name, value in raw:
            first.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
        self._first = first

    def __getitem__(self, key: str) -> str:
        return self._first[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._first

    def __iter__(self) -> Iterator[str]:
        return iter(self._first)

    def __len__(self) -> int:
        return len(self._first)

    def __repr__(self) -> str:
        return f"Headers({self._first!r})"


class MutableHeaders:
    """Response headers keyed case-insensitively, one value per name.

    Insertion order is kept so the emitted header block is stable.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: dict[str, tuple[str, str]] = {}

    def set(self, name: str, value: str) -> None:
        """Set *name* to *value*, replacing any previous value."""
        self._items[name.lower()] = (name, value)

    def get(self, name: str, default: str | None = None) -> str | None:
        item = self._items.get(name.lower())
        return item[1] if item is not None else default

    def delete(self, name: str) -> None:
        self._items.pop(name.lower(), None)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> list[tuple[str, str]]:
        return list(self._items.values())

    def raw(self) -> list[tuple[bytes, bytes]]:
        """Header pairs encoded for an ASGI ``http.response.start`` message."""
        return [
            (_key(name), value.encode("latin-1")) for name, value in self._items.values()
        ]

    def __repr__(self) -> str:
        return f"MutableHeaders({dict(self._items.values())!r})"
