"""Growable byte buffers and a pool to reuse them."""

from __future__ import annotations

import threading


class ByteBuffer:
    """A growable byte buffer."""

    __slots__ = ("data",)

    def __init__(self, data=b"") -> None:
        self.data = bytearray(data)

    def write(self, data) -> int:
        """Append ``data`` and return the number of bytes written."""
        self.data += data
        return len(data)

    def bytes(self) -> bytes:
        """Return a copy of the buffered bytes."""
        return bytes(self.data)

    def reset(self) -> None:
        """Discard all buffered bytes."""
        self.data.clear()

    def __len__(self) -> int:
        return len(self.data)


class ByteBufferPool:
    """A thread-safe pool of reusable byte buffers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._free: list[ByteBuffer] = []

    def get(self) -> ByteBuffer:
        """Return an empty buffer, reusing a pooled one when available."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return ByteBuffer()

    def put(self, buf: ByteBuffer) -> None:
        """Reset ``buf`` and return it to the pool."""
        buf.reset()
        with self._lock:
            self._free.append(buf)


_default_pool = ByteBufferPool()


def get() -> ByteBuffer:
    """Return an empty buffer from the default pool."""
    return _default_pool.get()


def put(buf: ByteBuffer | None) -> None:
    """Return ``buf`` to the default pool; ``None`` is ignored."""
    if buf is not None:
        _default_pool.put(buf)