"""A self-resizing circular byte buffer."""

from __future__ import annotations

from . import bytebuffer
from .bytebuffer import ByteBuffer
from .mathutil import ceil_to_power_of_two

_INIT_SIZE = 1 << 12  # first allocation for a zero-sized buffer


class RingBufferEmptyError(Exception):
    """Raised when reading from an empty ring-buffer."""

    def __init__(self, message: str = "ring-buffer is empty") -> None:
        super().__init__(message)


class RingBuffer:
    """A circular buffer that grows on write and shrinks on reset."""

    __slots__ = ("_buf", "_size", "_mask", "_r", "_w", "_is_empty")

    def __init__(self, size: int = 0) -> None:
        if size == 0:
            self._buf = bytearray()
            self._size = 0
            self._mask = 0
        else:
            size = ceil_to_power_of_two(size)
            self._buf = bytearray(size)
            self._size = size
            self._mask = size - 1
        self._r = 0
        self._w = 0
        self._is_empty = True

    def lazy_read(self, n: int) -> tuple[bytes, bytes]:
        """Return up to ``n`` readable bytes as (head, tail) without consuming them."""
        if self._is_empty or n <= 0:
            return b"", b""
        r, w, size = self._r, self._w, self._size
        if w > r:
            count = min(w - r, n)
            return bytes(self._buf[r:r + count]), b""
        count = min(size - r + w, n)
        if r + count <= size:
            return bytes(self._buf[r:r + count]), b""
        return bytes(self._buf[r:]), bytes(self._buf[:count - (size - r)])

    def lazy_read_all(self) -> tuple[bytes, bytes]:
        """Return all readable bytes as (head, tail) without consuming them."""
        if self._is_empty:
            return b"", b""
        r, w = self._r, self._w
        if w > r:
            return bytes(self._buf[r:w]), b""
        return bytes(self._buf[r:]), bytes(self._buf[:w])

    def shift(self, n: int) -> None:
        """Advance the read position by ``n`` bytes."""
        if n <= 0:
            return
        if n < self.length():
            self._r = (self._r + n) & self._mask
        else:
            self.reset()

    def read(self, size: int) -> bytes:
        """Consume and return up to ``size`` bytes."""
        if size <= 0:
            return b""
        if self._is_empty:
            raise RingBufferEmptyError()
        head, tail = self.lazy_read(size)
        count = len(head) + len(tail)
        self._r = (self._r + count) & self._mask
        if self._r == self._w:
            self.reset()
        return head + tail

    def read_byte(self) -> int:
        """Consume and return the next byte."""
        if self._is_empty:
            raise RingBufferEmptyError()
        b = self._buf[self._r]
        self._r += 1
        if self._r == self._size:
            self._r = 0
        if self._r == self._w:
            self.reset()
        return b

    def write(self, data) -> int:
        """Append ``data``, growing the buffer if needed; return its length."""
        n = len(data)
        if n == 0:
            return 0
        free = self.free()
        if n > free:
            self._grow(n - free)

        buf, w = self._buf, self._w
        if w >= self._r:
            c1 = self._size - w
            if c1 >= n:
                buf[w:w + n] = data
                w += n
            else:
                buf[w:] = data[:c1]
                buf[:n - c1] = data[c1:]
                w = n - c1
        else:
            buf[w:w + n] = data
            w += n

        if w == self._size:
            w = 0
        self._w = w
        self._is_empty = False
        return n

    def write_byte(self, c: int) -> None:
        """Append a single byte."""
        if self.free() < 1:
            self._grow(1)
        self._buf[self._w] = c
        self._w += 1
        if self._w == self._size:
            self._w = 0
        self._is_empty = False

    def write_string(self, s: str) -> int:
        """Append the UTF-8 encoding of ``s``."""
        return self.write(s.encode())

    def length(self) -> int:
        """Number of readable bytes."""
        r, w = self._r, self._w
        if r == w:
            return 0 if self._is_empty else self._size
        if w > r:
            return w - r
        return self._size - r + w

    def buffer_len(self) -> int:
        """Length of the underlying storage."""
        return len(self._buf)

    def capacity(self) -> int:
        """Size of the underlying storage."""
        return self._size

    def free(self) -> int:
        """Number of bytes that can be written without growing."""
        r, w = self._r, self._w
        if r == w:
            return self._size if self._is_empty else 0
        if w < r:
            return r - w
        return self._size - w + r

    def byte_buffer(self) -> ByteBuffer | None:
        """Copy all readable bytes into a pooled ByteBuffer, or None if empty."""
        if self._is_empty:
            return None
        head, tail = self.lazy_read_all()
        bb = bytebuffer.get()
        bb.write(head)
        bb.write(tail)
        return bb

    def with_byte_buffer(self, data) -> ByteBuffer:
        """Return the readable bytes followed by ``data`` in one ByteBuffer."""
        if self._is_empty:
            return ByteBuffer(data)
        head, tail = self.lazy_read_all()
        bb = bytebuffer.get()
        bb.write(head)
        bb.write(tail)
        bb.write(data)
        return bb

    def is_full(self) -> bool:
        return self._r == self._w and not self._is_empty

    def is_empty(self) -> bool:
        return self._is_empty

    def reset(self) -> None:
        """Empty the buffer and halve its storage."""
        self._is_empty = True
        self._r = self._w = 0
        new_cap = self._size >> 1
        self._buf = bytearray(new_cap)
        self._size = new_cap
        self._mask = new_cap - 1

    def _grow(self, extra: int) -> None:
        if self._size == 0 and extra < _INIT_SIZE:
            new_cap = _INIT_SIZE
        else:
            new_cap = ceil_to_power_of_two(self._size + extra)
        head, tail = self.lazy_read_all()
        old_len = len(head) + len(tail)
        new_buf = bytearray(new_cap)
        new_buf[:old_len] = head + tail
        self._buf = new_buf
        self._r = 0
        self._w = old_len
        self._size = new_cap
        self._mask = new_cap - 1