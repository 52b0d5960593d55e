"""Multi-value parameter mappings for query strings and form bodies.

Both are URL-encoded ``name=value`` sequences, so ``QueryParams`` and
``FormData`` share one parser and one read-only mapping base. Item
access returns the first value; ``get_list`` returns all of them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class _MultiDict(Mapping[str, str]):
    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        self._data = data or {}

    @classmethod
    def parse(cls, raw: bytes | str, encoding: str = "utf-8") -> _MultiDict:
        text = raw.decode(encoding, errors="replace") if isinstance(raw, bytes) else raw
        return cls(parse_qs(text, keep_blank_values=True))

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, ()))


class QueryParams(_MultiDict):
    """Parsed query string. Never consulted by route matching."""

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Value as int, or *default* when missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default


class FormData(_MultiDict):
    """Parsed ``application/x-www-form-urlencoded`` body.

    Values are raw user input: sanitize before echoing, validate before
    trusting.
    """

    def text(self, key: str) -> str:
        """First value for *key* with surrounding whitespace removed, ``""`` if absent."""
        return (self.get(key) or "").strip()
