"""Case-insensitive, read-only request headers.

Implements ``Mapping[str, str]``. Built from the raw byte pairs of an ASGI
scope; names are lower-cased and values decoded once, at construction.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only, case-insensitive HTTP headers.

    ``headers["Content-Type"]`` returns the first value for the name;
    ``get_list`` returns all of them, in arrival order.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._raw = tuple(raw)
        index: dict[str, list[str]] = {}
        for name, value in self._raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._index = index

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        return cls((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items())

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key* (empty list if none)."""
        return list(self._index.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw
