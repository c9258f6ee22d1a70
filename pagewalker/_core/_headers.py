"""
Header utilities used by the response cache.

Only the parts of RFC 7230/9111 that the cache relies on are implemented:
a case-insensitive header mapping and a Cache-Control parser that
understands tokens, ``token=value`` and ``token="quoted value"`` forms.
"""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Union,
)

_SEPARATORS = '()<>@,;:\\"/[]?={} \t'


def is_token(c: str) -> bool:
    """
    Check if character is valid in an HTTP token.

    Per RFC 7230 Section 3.2.6 token chars are US-ASCII characters that are
    neither control characters nor separators.

    Examples:
        >>> is_token('a')
        True
        >>> is_token('-')
        True
        >>> is_token(',')
        False
    """
    if not c:
        return False
    b = ord(c)
    return b <= 127 and not (b <= 31 or b == 127) and c not in _SEPARATORS


def http_unquote(raw: str) -> tuple[int, str]:
    """
    Unquote an HTTP quoted-string.

    ``raw`` must start with a double quote. Returns the number of characters
    consumed (including both quotes) and the unescaped value, or ``(-1, "")``
    if the closing quote is missing.

    Examples:
        >>> http_unquote('"60", public')
        (4, '60')
        >>> http_unquote('"a\\\\"b"')
        (6, 'a"b')
    """
    if not raw or raw[0] != '"':
        return -1, ""

    chars: List[str] = []
    i = 1
    while i < len(raw):
        c = raw[i]
        if c == "\\":
            if i + 1 >= len(raw):
                return -1, ""
            chars.append(raw[i + 1])
            i += 2
            continue
        if c == '"':
            return i + 1, "".join(chars)
        chars.append(c)
        i += 1

    return -1, ""


class Headers(MutableMapping[str, str]):
    def __init__(self, headers: Optional[Mapping[str, Union[str, List[str]]]] = None) -> None:
        self._headers: Dict[str, List[str]] = {
            k.lower(): ([v] if isinstance(v, str) else v[:]) for k, v in (headers or {}).items()
        }

    def get_list(self, key: str) -> Optional[List[str]]:
        return self._headers.get(key.lower(), None)

    def __getitem__(self, key: str) -> str:
        return ", ".join(self._headers[key.lower()])

    def __setitem__(self, key: str, value: str) -> None:
        self._headers.setdefault(key.lower(), []).append(value)

    def __delitem__(self, key: str) -> None:
        del self._headers[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"Headers({self._headers!r})"

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._headers == other_headers._headers

    def to_dict(self) -> Dict[str, str]:
        """Flatten into a plain ``dict``, joining repeated fields with ``", "``."""
        return {key: self[key] for key in self._headers}


class CacheControl:
    """
    Parsed Cache-Control directives.

    ``max_age`` is the only directive the response cache acts on; every other
    directive is kept verbatim in ``directives`` so callers can log it.
    """

    def __init__(self) -> None:
        self.max_age: Optional[int] = None
        self.directives: Dict[str, Optional[str]] = {}

    def __repr__(self) -> str:
        return f"CacheControl(max_age={self.max_age!r}, directives={self.directives!r})"


def parse_int_value(value: str) -> Optional[int]:
    """Parse a delta-seconds value, return None if invalid."""
    try:
        val = int(value)
        # Cap at max int32 like most caches do
        return min(val, 2147483647) if val >= 0 else None
    except (ValueError, OverflowError):
        return None


def _handle_directive(cc: CacheControl, token: str, value: Optional[str]) -> None:
    cc.directives[token] = value
    if token == "max-age" and value is not None:
        cc.max_age = parse_int_value(value)


def parse(value: str) -> CacheControl:
    """
    Parse a Cache-Control header value character by character.

    Malformed directives are skipped rather than rejected, the same way a
    browser cache would treat them.
    """
    cc = CacheControl()

    i = 0
    length = len(value)

    while i < length:
        # Skip leading whitespace and commas
        while i < length and value[i] in (" ", "\t", ","):
            i += 1

        if i >= length:
            break

        j = i
        while j < length and is_token(value[j]):
            j += 1

        if j == i:
            # Not a token character, skip it
            i += 1
            continue

        token = value[i:j].lower()

        while j < length and value[j] in (" ", "\t"):
            j += 1

        if j < length and value[j] == "=":
            k = j + 1
            while k < length and value[k] in (" ", "\t"):
                k += 1

            if k >= length:
                break

            if value[k] == '"':
                eaten, result = http_unquote(value[k:])
                if eaten == -1:
                    # Quote mismatch, nothing after it can be trusted
                    break
                i = k + eaten
            else:
                z = k
                while z < length and value[z] not in (" ", "\t", ","):
                    z += 1
                result = value[k:z]
                i = z

            _handle_directive(cc, token, result)
        else:
            _handle_directive(cc, token, None)
            i = j

    return cc


def parse_cache_control(value: str | None) -> CacheControl:
    """
    Parse a Cache-Control header.

    Examples:
        >>> parse_cache_control("public, max-age=3600").max_age
        3600
        >>> parse_cache_control('max-age="60"').max_age
        60
        >>> parse_cache_control("max-age=-1").max_age is None
        True
        >>> parse_cache_control(None).max_age is None
        True
    """
    if not value:
        return CacheControl()
    return parse(value)
