"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]`` with multi-value access. Stores the
header pairs in arrival order; lookups fold case on access.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Set-Cookie``).
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Mapping[str, str] | Iterable[tuple[str, str]] = ()) -> None:
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        object.__setattr__(self, "_pairs", tuple((str(k), str(v)) for k, v in pairs))

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        """Build from ASGI byte pairs."""
        return cls((k.decode("latin-1"), v.decode("latin-1")) for k, v in raw)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._pairs:
            if name.lower() == key_lower:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name.lower() == key_lower for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._pairs:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower()
        return [value for name, value in self._pairs if name.lower() == key_lower]

    def with_header(self, name: str, value: str) -> Headers:
        """Return new headers with *name* set to *value*, replacing any existing values."""
        key_lower = name.lower()
        kept = [(k, v) for k, v in self._pairs if k.lower() != key_lower]
        return Headers((*kept, (name, value)))

    def with_added(self, name: str, value: str) -> Headers:
        """Return new headers with one more *name* value appended."""
        return Headers((*self._pairs, (name, value)))

    def without(self, name: str) -> Headers:
        """Return new headers with every *name* value removed."""
        key_lower = name.lower()
        return Headers((k, v) for k, v in self._pairs if k.lower() != key_lower)

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """All header pairs in arrival order."""
        return self._pairs

    def to_raw(self) -> list[tuple[bytes, bytes]]:
        """Encode as ASGI byte pairs with lowercase names."""
        return [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self._pairs]
