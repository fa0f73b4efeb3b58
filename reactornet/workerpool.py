"""A bounded pool of reusable worker threads with idle expiry."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable

from . import logsetup

DEFAULT_POOL_SIZE = 1 << 18
EXPIRY_DURATION = 10.0
NONBLOCKING = True


class PoolOverloadError(Exception):
    """Raised when a non-blocking pool has no free worker for a task."""

    def __init__(self, message: str = "too many goroutines blocked on submit or Nonblocking is set") -> None:
        super().__init__(message)


class WorkerPool:
    """Runs submitted callables on at most ``capacity`` threads.

    A ``capacity`` of zero or less means no limit. Idle workers exit after
    ``expiry`` seconds. When the pool is full, a non-blocking pool raises
    PoolOverloadError and a blocking one waits for a free worker.
    """

    def __init__(self, capacity: int, expiry: float = EXPIRY_DURATION, nonblocking: bool = False) -> None:
        if expiry < 0:
            raise ValueError("invalid expiry for pool")
        self.capacity = capacity
        self.expiry = expiry if expiry > 0 else 1.0
        self.nonblocking = nonblocking
        self._cond = threading.Condition()
        self._tasks: deque[Callable[[], object]] = deque()
        self._running = 0
        self._idle = 0
        self._closed = False

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def _full(self) -> bool:
        return 0 < self.capacity <= self._running

    def _spawn(self) -> None:
        self._running += 1
        self._idle += 1
        threading.Thread(target=self._work, daemon=True).start()

    def submit(self, task: Callable[[], object]) -> None:
        """Hand ``task`` to a free worker, starting one if there is room."""
        with self._cond:
            if self._closed:
                raise RuntimeError("this pool has been closed")
            if self._idle <= len(self._tasks):
                if not self._full():
                    self._spawn()
                elif self.nonblocking:
                    raise PoolOverloadError()
                else:
                    while self._idle <= len(self._tasks) and self._full() and not self._closed:
                        self._cond.wait()
                    if self._closed:
                        raise RuntimeError("this pool has been closed")
                    if self._idle <= len(self._tasks):
                        self._spawn()
            self._tasks.append(task)
            self._cond.notify_all()

    def _work(self) -> None:
        while True:
            with self._cond:
                while not self._tasks and not self._closed:
                    if not self._cond.wait(timeout=self.expiry) and not self._tasks:
                        break
                if not self._tasks:
                    self._idle -= 1
                    self._running -= 1
                    self._cond.notify_all()
                    return
                task = self._tasks.popleft()
                self._idle -= 1
            try:
                task()
            except Exception as exc:  # a failing task must not kill the worker
                logsetup.error("worker exits from a panic: %s", exc)
            with self._cond:
                self._idle += 1
                self._cond.notify_all()

    def running(self) -> int:
        """Number of live worker threads."""
        with self._cond:
            return self._running

    def release(self) -> None:
        """Close the pool; workers finish queued tasks and then exit."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()


def default_pool() -> WorkerPool:
    """Return a non-blocking pool with the default capacity and expiry."""
    return WorkerPool(DEFAULT_POOL_SIZE, EXPIRY_DURATION, NONBLOCKING)