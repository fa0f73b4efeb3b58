"""A thread-safe FIFO queue of asynchronous tasks."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Optional

Task = Callable[[], object]


class TaskQueue:
    """An unbounded FIFO of tasks that may be used from several threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: deque[Task] = deque()

    def enqueue(self, task: Task) -> None:
        """Put ``task`` at the tail of the queue."""
        with self._lock:
            self._items.append(task)

    def dequeue(self) -> Optional[Task]:
        """Remove and return the task at the head, or None if the queue is empty."""
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def empty(self) -> bool:
        """Report whether the queue holds no tasks."""
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)