"""Byte sinks used by serializers.

Every writer accepts either a single byte (an ``int``) or a bytes-like
object and returns the number of bytes it actually took.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, Union

from fieldkit.numbers import STRING_BUFFER_SIZE

Data = Union[int, bytes, bytearray, memoryview]


class Writer(Protocol):
    def write(self, data: Data) -> int: ...


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, bool):
        raise TypeError("a bool is not a byte")
    if isinstance(data, int):
        if not 0 <= data <= 0xFF:
            raise ValueError(f"byte value out of range: {data}")
        return bytes((data,))
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"cannot write {type(data).__name__}")


class StaticStringWriter:
    """Writes into a buffer of fixed capacity, dropping what does not fit."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._buffer = bytearray()

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        room = self.capacity - len(self._buffer)
        taken = chunk[: max(room, 0)]
        self._buffer += taken
        return len(taken)

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buffer)


class StringWriter:
    """Appends everything to a growing string."""

    def __init__(self, initial: str = "") -> None:
        self._buffer = bytearray(initial.encode("utf-8"))

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        self._buffer += chunk
        return len(chunk)

    def getvalue(self) -> str:
        """Return the accumulated text."""
        return self._buffer.decode("utf-8")


class StreamWriter:
    """Forwards bytes to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        self.stream.write(chunk)
        return len(chunk)


class BufferedStringWriter:
    """Appends to a string through a small staging buffer.

    Bytes collect in a buffer of ``capacity - 1`` bytes that is appended to
    the destination when full. ``max_length`` bounds the destination; an
    append that would exceed it fails and leaves the buffer in place, after
    which further single-byte writes are refused.
    """

    def __init__(self, capacity: int = STRING_BUFFER_SIZE, max_length: int | None = None) -> None:
        if capacity < 2:
            raise ValueError("capacity must be at least 2")
        self.capacity = capacity
        self.max_length = max_length
        self._buffer = bytearray()
        self._value = bytearray()

    def _write_byte(self, byte: int) -> int:
        if len(self._buffer) + 1 >= self.capacity and self.flush() != 0:
            return 0
        self._buffer.append(byte)
        return 1

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        if isinstance(data, int):
            return self._write_byte(chunk[0])
        for byte in chunk:
            self._write_byte(byte)
        return len(chunk)

    def flush(self) -> int:
        """Append the buffer to the destination; return the bytes left buffered."""
        new_length = len(self._value) + len(self._buffer)
        if self.max_length is None or new_length <= self.max_length:
            self._value += self._buffer
            self._buffer.clear()
        return len(self._buffer)

    def getvalue(self) -> str:
        """Flush and return the destination text."""
        self.flush()
        return self._value.decode("utf-8", errors="replace")

    def __enter__(self) -> BufferedStringWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.flush()


class DummyWriter:
    """Discards everything while reporting it as written."""

    def write(self, data: Data) -> int:
        return len(_as_bytes(data))


class CountingDecorator:
    """Wraps a writer and counts the bytes it accepts."""

    def __init__(self, writer: Writer) -> None:
        self.writer = writer
        self.count = 0

    def write(self, data: Data) -> int:
        written = self.writer.write(data)
        self.count += written
        return written