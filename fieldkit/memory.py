"""A fixed-capacity memory pool and the string builders that fill it.

The pool is one byte buffer. Strings grow from the start, variant slots
from the end, and the pool overflows when the two would meet:

    | strings... |   (free)   | ...variants |
    0           left        right         end

Strings are stored NUL-terminated and, by default, deduplicated.
"""

from __future__ import annotations

from fieldkit.strings import JsonString, Ownership

POINTER_SIZE = 8
DEFAULT_SLOT_SIZE = 32

_MASK = POINTER_SIZE - 1


def is_aligned(value: int) -> bool:
    """Return True if ``value`` is a multiple of the pointer size."""
    return value & _MASK == 0


def add_padding(size: int) -> int:
    """Round ``size`` up to the next multiple of the pointer size."""
    return (size + _MASK) & ~_MASK


def _encode(text: object) -> bytes | None:
    if text is None:
        return None
    if isinstance(text, JsonString):
        return None if text.is_null() else text.text.encode("utf-8")
    if isinstance(text, str):
        return text.encode("utf-8")
    if isinstance(text, (bytes, bytearray, memoryview)):
        return bytes(text)
    raise TypeError(f"{type(text).__name__} is not a string")


class MemoryPool:
    """A byte buffer holding strings at the front and variant slots at the back."""

    def __init__(
        self,
        capacity: int,
        slot_size: int = DEFAULT_SLOT_SIZE,
        deduplicate: bool = True,
    ) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        if not is_aligned(capacity):
            raise ValueError("capacity must be a multiple of the pointer size")
        if slot_size <= 0 or not is_aligned(slot_size):
            raise ValueError("slot size must be a positive multiple of the pointer size")
        self.slot_size = slot_size
        self.deduplicate = deduplicate
        self._buffer = bytearray(capacity)
        self._left = 0
        self._right = capacity
        self._end = capacity
        self._overflowed = False

    @property
    def buffer(self) -> bytes:
        """A snapshot of the pool's bytes."""
        return bytes(self._buffer)

    @property
    def capacity(self) -> int:
        return self._end

    @property
    def size(self) -> int:
        """Bytes in use by strings and variant slots."""
        return self._left + self._end - self._right

    @property
    def overflowed(self) -> bool:
        return self._overflowed

    def can_alloc(self, nbytes: int) -> bool:
        """Return True if ``nbytes`` fit in the free zone."""
        return self._left + nbytes <= self._right

    def alloc_variant(self) -> int | None:
        """Reserve one variant slot; return its offset, or None on overflow."""
        if not self.can_alloc(self.slot_size):
            self._overflowed = True
            return None
        self._right -= self.slot_size
        self._buffer[self._right:self._right + self.slot_size] = bytes(self.slot_size)
        return self._right

    def _find_string(self, data: bytes) -> int | None:
        n = len(data)
        buf = self._buffer
        pos = 0
        while pos + n < self._left:
            if buf[pos + n] == 0 and buf[pos:pos + n] == data:
                return pos
            while buf[pos]:
                pos += 1
            pos += 1
        return None

    def save_string(self, text: object) -> int | None:
        """Store a NUL-terminated copy of ``text``; return its offset.

        Returns None for a null string or when the pool overflows. An
        identical string already in the pool is reused.
        """
        data = _encode(text)
        if data is None:
            return None
        if self.deduplicate:
            existing = self._find_string(data)
            if existing is not None:
                return existing
        n = len(data) + 1
        if not self.can_alloc(n):
            self._overflowed = True
            return None
        offset = self._left
        self._buffer[offset:offset + n] = data + b"\0"
        self._left += n
        return offset

    def free_zone(self) -> tuple[int, int]:
        """Return (offset, size) of the free space between strings and slots."""
        return self._left, self._right - self._left

    def save_string_from_free_zone(self, data: bytes) -> int:
        """Commit ``data`` at the start of the free zone; return its offset."""
        data = bytes(data)
        if self.deduplicate:
            existing = self._find_string(data)
            if existing is not None:
                return existing
        n = len(data) + 1
        if not self.can_alloc(n):
            raise ValueError("string does not fit in the free zone")
        offset = self._left
        self._buffer[offset:offset + n] = data + b"\0"
        self._left += n
        return offset

    def mark_as_overflowed(self) -> None:
        self._overflowed = True

    def clear(self) -> None:
        """Release everything and reset the overflow flag."""
        self._left = 0
        self._right = self._end
        self._overflowed = False

    def squash(self) -> int:
        """Move the slots down against the strings; return the bytes reclaimed."""
        new_right = add_padding(self._left)
        if new_right >= self._right:
            return 0
        right_size = self._end - self._right
        self._buffer[new_right:new_right + right_size] = self._buffer[self._right:self._end]
        reclaimed = self._right - new_right
        self._right = new_right
        self._end = new_right + right_size
        del self._buffer[self._end:]
        return reclaimed


class StringCopier:
    """Builds a string in a pool's free zone, then commits it."""

    def __init__(self, pool: MemoryPool) -> None:
        self.pool = pool
        self._chars: bytearray | None = None
        self._capacity = 0

    @property
    def size(self) -> int:
        return len(self._chars) if self._chars is not None else 0

    def start_string(self) -> None:
        _, self._capacity = self.pool.free_zone()
        self._chars = bytearray()
        if self._capacity == 0:
            self.pool.mark_as_overflowed()

    def append(self, text: str | bytes | int) -> None:
        """Append characters, marking the pool as overflowed when full."""
        if self._chars is None:
            raise RuntimeError("start_string() was not called")
        data = bytes((text,)) if isinstance(text, int) else _encode(text)
        for byte in data:
            if len(self._chars) + 1 < self._capacity:
                self._chars.append(byte)
            else:
                self.pool.mark_as_overflowed()

    def is_valid(self) -> bool:
        return not self.pool.overflowed

    def _as_json_string(self) -> JsonString:
        text = bytes(self._chars).decode("utf-8", errors="replace")
        return JsonString(text, len(text), Ownership.COPIED)

    def str(self) -> JsonString:
        """Return the string built so far without committing it."""
        if self._chars is None:
            raise RuntimeError("start_string() was not called")
        return self._as_json_string()

    def save(self) -> JsonString:
        """Commit the string to the pool and return it."""
        if self._chars is None:
            raise RuntimeError("start_string() was not called")
        if len(self._chars) >= self._capacity:
            raise RuntimeError("no room for the string terminator")
        self.pool.save_string_from_free_zone(bytes(self._chars))
        return self._as_json_string()


class StringMover:
    """Builds strings in place inside a mutable input buffer."""

    def __init__(self, buffer: bytearray, position: int = 0) -> None:
        if not isinstance(buffer, bytearray):
            raise TypeError("buffer must be a bytearray")
        self.buffer = buffer
        self._write = position
        self._start = position

    @property
    def size(self) -> int:
        return self._write - self._start

    def _put(self, index: int, byte: int) -> None:
        if index < len(self.buffer):
            self.buffer[index] = byte
        else:
            self.buffer.append(byte)

    def start_string(self) -> None:
        self._start = self._write

    def append(self, text: str | bytes | int) -> None:
        data = bytes((text,)) if isinstance(text, int) else _encode(text)
        for byte in data:
            self._put(self._write, byte)
            self._write += 1

    def is_valid(self) -> bool:
        return True

    def str(self) -> JsonString:
        """Terminate the current string and return it, linked to the buffer."""
        self._put(self._write, 0)
        text = bytes(self.buffer[self._start:self._write]).decode("utf-8", errors="replace")
        return JsonString(text, len(text), Ownership.LINKED)

    def save(self) -> JsonString:
        result = self.str()
        self._write += 1
        return result


def make_string_storage(source: object, pool: MemoryPool | None) -> StringCopier | StringMover:
    """Choose in-place storage for a mutable buffer, copying storage otherwise."""
    if isinstance(source, bytearray):
        return StringMover(source)
    if pool is None:
        raise ValueError("a pool is required to copy strings")
    return StringCopier(pool)