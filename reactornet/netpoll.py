"""An I/O readiness poller with a cross-thread task queue and wake-up channel."""

from __future__ import annotations

import errno
import os
import selectors
import socket
import sys
import threading
from typing import Callable, Optional

from . import logsetup
from .taskqueue import Task, TaskQueue

ASYNC_TASKS = 64
"""Maximum number of queued tasks run in one pass of the poll loop."""

IN_EVENTS = selectors.EVENT_READ
"""Event bit reported for readable file descriptors."""

OUT_EVENTS = selectors.EVENT_WRITE
"""Event bit reported for writable file descriptors."""

_WAKE_BYTES = (1).to_bytes(8, sys.byteorder)


class ServerShutdown(Exception):
    """Raised to stop a poll loop because the server is shutting down."""

    def __init__(self, message: str = "server is going to be shutdown") -> None:
        super().__init__(message)


class AcceptSocketError(Exception):
    """Raised when accepting a new connection fails and the loop must stop."""

    def __init__(self, message: str = "accept a new connection error") -> None:
        super().__init__(message)


def _noop() -> None:
    return None


def _block_forever() -> int:
    return -1


class Poller:
    """Watches file descriptors for readiness and runs tasks handed over by other threads.

    ``polling`` blocks the calling thread. It ends by raising ServerShutdown or
    AcceptSocketError when a callback, task or ``proc`` hook raises one, or by
    re-raising the OSError of a failed wait.
    """

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()
        try:
            self._wake_r, self._wake_w = socket.socketpair()
        except OSError:
            self._selector.close()
            raise
        self._wake_r.setblocking(False)
        self._wake_w.setblocking(False)
        self._wake_lock = threading.Lock()
        self._wake_sig = False
        self._tasks = TaskQueue()
        self._init: Callable[[], object] = _noop
        self._proc: Callable[[], object] = _noop
        self._wait_timeout: Callable[[], int] = _block_forever
        try:
            self.add_read(self._wake_r.fileno())
        except OSError:
            self.close()
            raise

    def __enter__(self) -> "Poller":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the selector and the wake-up channel."""
        self._selector.close()
        self._wake_r.close()
        self._wake_w.close()

    def init_logic(
        self,
        init: Callable[[], object],
        proc: Callable[[], object],
        wait_timeout: Callable[[], int],
    ) -> None:
        """Install hooks: run once before polling, after each pass, and the wait in ms (<0 blocks)."""
        self._init = init
        self._proc = proc
        self._wait_timeout = wait_timeout

    def _wake(self) -> None:
        try:
            self._wake_w.send(_WAKE_BYTES)
        except BlockingIOError:
            # The channel is already full, so the loop is bound to wake up.
            pass

    def trigger(self, task: Task) -> None:
        """Queue ``task`` and wake the poll loop to run it."""
        self._tasks.enqueue(task)
        with self._wake_lock:
            if self._wake_sig:
                return
            self._wake_sig = True
        self._wake()

    def _drain_wake(self) -> None:
        while True:
            try:
                if not self._wake_r.recv(4096):
                    return
            except BlockingIOError:
                return

    def _run_tasks(self) -> None:
        for _ in range(ASYNC_TASKS):
            task = self._tasks.dequeue()
            if task is None:
                break
            try:
                task()
            except ServerShutdown:
                raise
            except Exception as exc:
                logsetup.warning("Error occurs in user-defined function, %s", exc)
        with self._wake_lock:
            self._wake_sig = False
        if not self._tasks.empty():
            self._wake()

    def polling(self, callback: Callable[[int, int], object]) -> None:
        """Wait for events and hand each ready descriptor and its event mask to ``callback``."""
        self._init()
        wait_ms = self._wait_timeout()
        timeout: Optional[float] = None if wait_ms < 0 else wait_ms / 1000
        wake_fd = self._wake_r.fileno()

        while True:
            try:
                ready = self._selector.select(timeout)
            except OSError as exc:
                logsetup.warning("Error occurs in poller: %s, timeout: %s", exc, timeout)
                raise

            timeout = 0 if ready else (None if wait_ms < 0 else wait_ms / 1000)

            woken = False
            for key, mask in ready:
                if key.fd == wake_fd:
                    woken = True
                    self._drain_wake()
                    continue
                try:
                    callback(key.fd, mask)
                except (ServerShutdown, AcceptSocketError):
                    raise
                except Exception as exc:
                    logsetup.warning("Error occurs in event-loop: %s", exc)

            try:
                self._proc()
            except ServerShutdown:
                raise
            except Exception as exc:
                logsetup.debug("proc hook failed: %s", exc)

            if woken:
                self._run_tasks()

    def _register(self, fd, events: int) -> None:
        try:
            self._selector.register(fd, events)
        except KeyError:
            raise FileExistsError(errno.EEXIST, "descriptor is already registered", str(fd)) from None

    def _modify(self, fd, events: int) -> None:
        try:
            self._selector.modify(fd, events)
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "descriptor is not registered", str(fd)) from None

    def add_read_write(self, fd) -> None:
        """Watch ``fd`` for readable and writable events."""
        self._register(fd, IN_EVENTS | OUT_EVENTS)

    def add_read(self, fd) -> None:
        """Watch ``fd`` for readable events."""
        self._register(fd, IN_EVENTS)

    def add_write(self, fd) -> None:
        """Watch ``fd`` for writable events."""
        self._register(fd, OUT_EVENTS)

    def mod_read(self, fd) -> None:
        """Watch an already registered ``fd`` for readable events only."""
        self._modify(fd, IN_EVENTS)

    def mod_read_write(self, fd) -> None:
        """Watch an already registered ``fd`` for readable and writable events."""
        self._modify(fd, IN_EVENTS | OUT_EVENTS)

    def delete(self, fd) -> None:
        """Stop watching ``fd``."""
        try:
            self._selector.unregister(fd)
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "descriptor is not registered", str(fd)) from None


def dup(fd: int) -> int:
    """Duplicate ``fd``; the copy is closed on exec."""
    new_fd = os.dup(fd)
    os.set_inheritable(new_fd, False)
    return new_fd