"""A self-calibrating pool of ring-buffers."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .ringbuffer import RingBuffer

_MIN_BIT_SIZE = 6  # 2**6 = 64, a CPU cache line
_STEPS = 20
_MIN_SIZE = 1 << _MIN_BIT_SIZE
_CALIBRATE_CALLS_THRESHOLD = 42000
_MAX_PERCENTILE = 0.95


@dataclass
class _CallSize:
    calls: int
    size: int


def _index(n: int) -> int:
    n = (n - 1) >> _MIN_BIT_SIZE
    idx = n.bit_length() if n > 0 else 0
    return min(idx, _STEPS - 1)


class RingBufferPool:
    """Pool of ring-buffers that learns the typical buffer size from its use."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls = [0] * _STEPS
        self._default_size = 0
        self._max_size = 0
        self._free: list[RingBuffer] = []

    def get(self) -> RingBuffer:
        """Return a pooled buffer, or a new one of the calibrated default size."""
        with self._lock:
            if self._free:
                return self._free.pop()
            default_size = self._default_size
        return RingBuffer(default_size)

    def put(self, rb: RingBuffer) -> None:
        """Reset ``rb`` and keep it for reuse unless it is oversized."""
        idx = _index(rb.buffer_len())
        with self._lock:
            self._calls[idx] += 1
            if self._calls[idx] > _CALIBRATE_CALLS_THRESHOLD:
                self._calibrate()
            max_size = self._max_size
        if max_size == 0 or rb.capacity() <= max_size:
            rb.reset()
            with self._lock:
                self._free.append(rb)

    def _calibrate(self) -> None:
        entries = [
            _CallSize(calls=calls, size=_MIN_SIZE << i)
            for i, calls in enumerate(self._calls)
        ]
        self._calls = [0] * _STEPS
        calls_sum = sum(e.calls for e in entries)
        entries.sort(key=lambda e: e.calls, reverse=True)

        default_size = entries[0].size
        max_size = default_size
        max_sum = int(calls_sum * _MAX_PERCENTILE)
        calls_sum = 0
        for entry in entries:
            if calls_sum > max_sum:
                break
            calls_sum += entry.calls
            max_size = max(max_size, entry.size)

        self._default_size = default_size
        self._max_size = max_size


_default_pool = RingBufferPool()


def get() -> RingBuffer:
    """Return a ring-buffer from the default pool."""
    return _default_pool.get()


def put(rb: RingBuffer) -> None:
    """Return a ring-buffer to the default pool."""
    _default_pool.put(rb)