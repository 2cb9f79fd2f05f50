from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, List

DELIMITER = "."


class NamePath:
    """
    Dotted name of the field being decoded, e.g. ``name.first``.

    The buffer only grows and shrinks at the tail: ``push`` a segment before
    descending into a nested record and ``truncate`` back to the returned mark
    after it, so siblings never see a stale suffix.
    """

    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf: List[str] = []

    def __len__(self) -> int:
        return len(self._buf)

    def push(self, segment: str) -> int:
        mark = len(self._buf)
        self._buf.append(segment)
        self._buf.append(DELIMITER)
        return mark

    def append(self, segment: str) -> int:
        mark = len(self._buf)
        self._buf.append(segment)
        return mark

    def truncate(self, mark: int) -> None:
        del self._buf[mark:]

    def value(self) -> str:
        return "".join(self._buf)

    def reset(self) -> None:
        self._buf.clear()


class NamePathPool:
    """Thread-safe pool of NamePath buffers shared by concurrent decodes."""

    def __init__(self, max_idle: int = 64):
        self.max_idle = max(0, int(max_idle))
        self._lock = threading.Lock()
        self._idle: List[NamePath] = []
        self.created = 0

    def get(self) -> NamePath:
        with self._lock:
            if self._idle:
                return self._idle.pop()
            self.created += 1
        return NamePath()

    def put(self, path: NamePath) -> None:
        path.reset()
        with self._lock:
            if len(self._idle) < self.max_idle:
                self._idle.append(path)

    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    @contextmanager
    def borrow(self) -> Iterator[NamePath]:
        path = self.get()
        try:
            yield path
        finally:
            self.put(path)
