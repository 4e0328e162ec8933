"""Strict URL splitter for request targets and absolute URLs.

A URL is split into schema, host, port, path, query, fragment and userinfo
by a character-level state machine. The grammar is strict: only printable
ASCII is accepted, host names may hold letters, digits, dots and hyphens,
and bracketed IPv6 hosts (with an optional zone id) are recognised.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from types import MappingProxyType
from typing import Mapping

VERSION_MAJOR = 2
VERSION_MINOR = 7
VERSION_PATCH = 1

_MAX_PORT = 0xFFFF

_ALPHA = frozenset(string.ascii_letters)
_DIGITS = frozenset(string.digits)
_ALNUM = _ALPHA | _DIGITS
_HEX = frozenset(string.hexdigits)
_MARK = frozenset("-_.!~*'()")
_USERINFO = _ALNUM | _MARK | frozenset("%;:&=+$,")
_HOST = _ALNUM | frozenset(".-")
_ZONE = _ALNUM | frozenset("%.-_~")
_TERMINATORS = frozenset(" \r\n\t\f")


class UrlField(IntEnum):
    """The parts a URL is split into."""

    SCHEMA = 0
    HOST = 1
    PORT = 2
    PATH = 3
    QUERY = 4
    FRAGMENT = 5
    USERINFO = 6


class UrlParseError(ValueError):
    """Raised when a URL does not match the grammar."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message if position is None else f"{message} at offset {position}")
        self.position = position


@dataclass(frozen=True)
class ParsedUrl:
    """The result of splitting a URL: field spans into the original text."""

    url: str
    spans: Mapping[UrlField, tuple[int, int]] = field(default_factory=dict)
    port: int | None = None

    @property
    def fields(self) -> frozenset[UrlField]:
        """The fields present in the URL."""
        return frozenset(self.spans)

    def __contains__(self, item: object) -> bool:
        return item in self.spans

    def span(self, field: UrlField) -> tuple[int, int] | None:
        """Return (offset, length) of a field, or None if it is absent."""
        return self.spans.get(UrlField(field))

    def get(self, field: UrlField) -> str | None:
        """Return the text of a field, or None if it is absent."""
        found = self.span(field)
        if found is None:
            return None
        offset, length = found
        return self.url[offset:offset + length]


def _is_url_char(ch: str) -> bool:
    return "!" <= ch <= "~" and ch not in "#?"


class _State(Enum):
    DEAD = auto()
    SPACES_BEFORE_URL = auto()
    SCHEMA = auto()
    SCHEMA_SLASH = auto()
    SCHEMA_SLASH_SLASH = auto()
    SERVER_START = auto()
    SERVER = auto()
    SERVER_WITH_AT = auto()
    PATH = auto()
    QUERY_STRING_START = auto()
    QUERY_STRING = auto()
    FRAGMENT_START = auto()
    FRAGMENT = auto()


class _HostState(Enum):
    DEAD = auto()
    USERINFO_START = auto()
    USERINFO = auto()
    HOST_START = auto()
    V6_START = auto()
    HOST = auto()
    V6 = auto()
    V6_END = auto()
    V6_ZONE_START = auto()
    V6_ZONE = auto()
    PORT_START = auto()
    PORT = auto()


_SKIPPED_STATES = frozenset({
    _State.SCHEMA_SLASH,
    _State.SCHEMA_SLASH_SLASH,
    _State.SERVER_START,
    _State.QUERY_STRING_START,
    _State.FRAGMENT_START,
})

_FIELD_OF_STATE = {
    _State.SCHEMA: UrlField.SCHEMA,
    _State.SERVER: UrlField.HOST,
    _State.SERVER_WITH_AT: UrlField.HOST,
    _State.PATH: UrlField.PATH,
    _State.QUERY_STRING: UrlField.QUERY,
    _State.FRAGMENT: UrlField.FRAGMENT,
}

_BAD_HOST_END_STATES = frozenset({
    _HostState.HOST_START,
    _HostState.V6_START,
    _HostState.V6,
    _HostState.V6_ZONE_START,
    _HostState.V6_ZONE,
    _HostState.PORT_START,
    _HostState.USERINFO,
    _HostState.USERINFO_START,
})


def _next_state(s: _State, ch: str) -> _State:
    if ch in _TERMINATORS:
        return _State.DEAD

    if s is _State.SPACES_BEFORE_URL:
        if ch in "/*":
            return _State.PATH
        if ch in _ALPHA:
            return _State.SCHEMA
    elif s is _State.SCHEMA:
        if ch in _ALPHA:
            return s
        if ch == ":":
            return _State.SCHEMA_SLASH
    elif s is _State.SCHEMA_SLASH:
        if ch == "/":
            return _State.SCHEMA_SLASH_SLASH
    elif s is _State.SCHEMA_SLASH_SLASH:
        if ch == "/":
            return _State.SERVER_START
    elif s in (_State.SERVER_WITH_AT, _State.SERVER_START, _State.SERVER):
        if s is _State.SERVER_WITH_AT and ch == "@":
            return _State.DEAD
        if ch == "/":
            return _State.PATH
        if ch == "?":
            return _State.QUERY_STRING_START
        if ch == "@":
            return _State.SERVER_WITH_AT
        if ch in _USERINFO or ch in "[]":
            return _State.SERVER
    elif s is _State.PATH:
        if _is_url_char(ch):
            return s
        if ch == "?":
            return _State.QUERY_STRING_START
        if ch == "#":
            return _State.FRAGMENT_START
    elif s in (_State.QUERY_STRING_START, _State.QUERY_STRING):
        if _is_url_char(ch) or ch == "?":
            return _State.QUERY_STRING
        if ch == "#":
            return _State.FRAGMENT_START
    elif s is _State.FRAGMENT_START:
        if _is_url_char(ch) or ch == "?":
            return _State.FRAGMENT
        if ch == "#":
            return s
    elif s is _State.FRAGMENT:
        if _is_url_char(ch) or ch in "?#":
            return s
    return _State.DEAD


def _next_host_state(s: _HostState, ch: str) -> _HostState:
    if s in (_HostState.USERINFO, _HostState.USERINFO_START):
        if ch == "@":
            return _HostState.HOST_START
        if ch in _USERINFO:
            return _HostState.USERINFO
    elif s is _HostState.HOST_START:
        if ch == "[":
            return _HostState.V6_START
        if ch in _HOST:
            return _HostState.HOST
    elif s in (_HostState.HOST, _HostState.V6_END):
        if s is _HostState.HOST and ch in _HOST:
            return _HostState.HOST
        if ch == ":":
            return _HostState.PORT_START
    elif s in (_HostState.V6, _HostState.V6_START):
        if s is _HostState.V6 and ch == "]":
            return _HostState.V6_END
        if ch in _HEX or ch in ":.":
            return _HostState.V6
        if s is _HostState.V6 and ch == "%":
            return _HostState.V6_ZONE_START
    elif s in (_HostState.V6_ZONE, _HostState.V6_ZONE_START):
        if s is _HostState.V6_ZONE and ch == "]":
            return _HostState.V6_END
        if ch in _ZONE:
            return _HostState.V6_ZONE
    elif s in (_HostState.PORT, _HostState.PORT_START):
        if ch in _DIGITS:
            return _HostState.PORT
    return _HostState.DEAD


def _split_host(url: str, spans: dict[UrlField, list[int]], found_at: bool) -> None:
    """Refine the raw host span into userinfo, host and port spans."""
    host = spans[UrlField.HOST]
    start, end = host[0], host[0] + host[1]
    host[1] = 0
    s = _HostState.USERINFO_START if found_at else _HostState.HOST_START

    for pos in range(start, end):
        new_s = _next_host_state(s, url[pos])
        if new_s is _HostState.DEAD:
            raise UrlParseError("invalid character in authority", pos)

        if new_s in (_HostState.HOST, _HostState.V6):
            if s is not new_s:
                host[0] = pos
            host[1] += 1
        elif new_s in (_HostState.V6_ZONE_START, _HostState.V6_ZONE):
            host[1] += 1
        elif new_s is _HostState.PORT:
            if s is not _HostState.PORT:
                spans[UrlField.PORT] = [pos, 0]
            spans[UrlField.PORT][1] += 1
        elif new_s is _HostState.USERINFO:
            if s is not _HostState.USERINFO:
                spans[UrlField.USERINFO] = [pos, 0]
            spans[UrlField.USERINFO][1] += 1
        s = new_s

    if s in _BAD_HOST_END_STATES:
        raise UrlParseError("authority ends unexpectedly", end)


def parse_url(url: str, is_connect: bool = False) -> ParsedUrl:
    """Split a URL into its fields.

    With ``is_connect`` the input must be a bare ``host:port`` pair, as in
    the target of a CONNECT request. Raises UrlParseError on invalid input.
    """
    if not isinstance(url, str):
        raise TypeError("url must be a str")

    s = _State.SERVER_START if is_connect else _State.SPACES_BEFORE_URL
    spans: dict[UrlField, list[int]] = {}
    previous: UrlField | None = None
    found_at = False

    for pos, ch in enumerate(url):
        s = _next_state(s, ch)
        if s is _State.DEAD:
            raise UrlParseError("invalid character in URL", pos)
        if s in _SKIPPED_STATES:
            continue
        if s is _State.SERVER_WITH_AT:
            found_at = True

        current = _FIELD_OF_STATE[s]
        if current is previous:
            spans[current][1] += 1
            continue
        spans[current] = [pos, 1]
        previous = current

    if UrlField.SCHEMA in spans and UrlField.HOST not in spans:
        raise UrlParseError("a URL with a schema must have a host")

    if UrlField.HOST in spans:
        _split_host(url, spans, found_at)

    if is_connect and set(spans) != {UrlField.HOST, UrlField.PORT}:
        raise UrlParseError("a CONNECT target must be host:port")

    port = None
    if UrlField.PORT in spans:
        offset, length = spans[UrlField.PORT]
        port = int(url[offset:offset + length])
        if port > _MAX_PORT:
            raise UrlParseError(f"port {port} is out of range", offset)

    frozen = {key: (value[0], value[1]) for key, value in sorted(spans.items())}
    return ParsedUrl(url=url, spans=MappingProxyType(frozen), port=port)


def parser_version() -> int:
    """Return the parser version packed as major << 16 | minor << 8 | patch."""
    return VERSION_MAJOR << 16 | VERSION_MINOR << 8 | VERSION_PATCH