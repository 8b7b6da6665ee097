"""Read-only request fields: headers, query parameters, cookies.

``Headers`` and ``QueryParams`` are immutable ``Mapping[str, str]`` views
where ``[key]`` returns the first value and ``get_list`` returns all of
them. Both decode once at construction.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class _MultiMapping(Mapping[str, str]):
    """Immutable mapping of keys to one or more string values."""

    __slots__ = ("_data",)

    _data: dict[str, list[str]]

    def __init__(self, data: dict[str, list[str]]) -> None:
        object.__setattr__(self, "_data", data)

    def _key(self, key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        return self._data[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(self._key(key))
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(self._key(key), []))


class Headers(_MultiMapping):
    """Case-insensitive HTTP headers built from raw ASGI byte pairs."""

    __slots__ = ("_raw",)

    _raw: tuple[tuple[bytes, bytes], ...]

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        data: dict[str, list[str]] = {}
        for name, value in raw:
            data.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        super().__init__(data)
        object.__setattr__(self, "_raw", raw)

    def _key(self, key: str) -> str:
        return key.lower()

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Access raw header byte pairs for ASGI compatibility."""
        return self._raw


class QueryParams(_MultiMapping):
    """Query string parameters. Blank values are kept (``?location=`` -> ``""``)."""

    __slots__ = ("_raw",)

    _raw: bytes

    def __init__(self, query_string: bytes = b"") -> None:
        text = query_string.decode("latin-1")
        super().__init__(parse_qs(text, keep_blank_values=True))
        object.__setattr__(self, "_raw", query_string)

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep:
            cookies[key.strip()] = value.strip()
    return cookies
