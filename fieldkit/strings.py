"""String values, storage policies and string comparison.

A JsonString is a sized reference to text that remembers whether it is
stored by reference (linked) or was copied into document memory. Plain
``str``, ``bytes`` and ``bytearray`` values are accepted wherever a string
is expected; ``bytes`` are read as UTF-8.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

StringLike = Union["JsonString", str, bytes, bytearray, memoryview]


class Ownership(Enum):
    """How a JsonString holds its characters."""

    COPIED = "copied"
    LINKED = "linked"


class StoragePolicy(Enum):
    """How a string must be stored when it enters a document."""

    LINK = "link"
    COPY = "copy"


class JsonString:
    """A sized, possibly null string with an ownership flag."""

    __slots__ = ("_data", "_size", "_ownership")

    def __init__(
        self,
        data: str | None = None,
        size: int | None = None,
        ownership: Ownership = Ownership.LINKED,
    ) -> None:
        if data is not None and not isinstance(data, str):
            raise TypeError("data must be a str or None")
        if size is None:
            size = len(data) if data is not None else 0
        if size < 0:
            raise ValueError("size must not be negative")
        if data is not None and size > len(data):
            raise ValueError("size exceeds the length of the data")
        self._data = data
        self._size = size
        self._ownership = Ownership(ownership)

    @property
    def data(self) -> str | None:
        """The underlying characters, or None for a null string."""
        return self._data

    @property
    def size(self) -> int:
        return self._size

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def text(self) -> str | None:
        """The first ``size`` characters, or None for a null string."""
        if self._data is None:
            return None
        return self._data[: self._size]

    def is_null(self) -> bool:
        """Return True if the string is null."""
        return self._data is None

    def is_linked(self) -> bool:
        """Return True if the string is stored by reference."""
        return self._ownership is Ownership.LINKED

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._data is not None

    def __str__(self) -> str:
        return self.text or ""

    def __repr__(self) -> str:
        return f"JsonString({self.text!r}, ownership={self._ownership.name})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            other = JsonString(other)
        if not isinstance(other, JsonString):
            return NotImplemented
        if self._size != other._size:
            return False
        if self._data is None and other._data is None:
            return True
        if self._data is None or other._data is None:
            return False
        return self.text == other.text

    def __hash__(self) -> int:
        return hash((self._size, self.text))


def storage_policy(value: StringLike) -> StoragePolicy:
    """Return how ``value`` would be stored in a document.

    Linked JsonStrings and immutable ``str``/``bytes`` are linked; copied
    JsonStrings and mutable buffers are copied. Raises TypeError for
    anything that is not a string.
    """
    if isinstance(value, JsonString):
        return StoragePolicy.LINK if value.is_linked() else StoragePolicy.COPY
    if isinstance(value, (str, bytes)):
        return StoragePolicy.LINK
    if isinstance(value, (bytearray, memoryview)):
        return StoragePolicy.COPY
    raise TypeError(f"{type(value).__name__} is not a string")


def _adapt(value: StringLike) -> str:
    if isinstance(value, JsonString):
        text = value.text
        if text is None:
            raise ValueError("cannot compare a null string")
        return text
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="surrogateescape")
    if value is None:
        raise ValueError("cannot compare a null string")
    raise TypeError(f"{type(value).__name__} is not a string")


def string_compare(a: StringLike, b: StringLike) -> int:
    """Compare two strings.

    Returns the difference of the first differing character codes, or
    -1, 0 or 1 when one string is a prefix of the other or both are equal.
    """
    s1, s2 = _adapt(a), _adapt(b)
    for c1, c2 in zip(s1, s2):
        if c1 != c2:
            return ord(c1) - ord(c2)
    if len(s1) < len(s2):
        return -1
    if len(s1) > len(s2):
        return 1
    return 0


def string_equals(a: StringLike, b: StringLike) -> bool:
    """Return True if both strings hold the same characters."""
    return _adapt(a) == _adapt(b)