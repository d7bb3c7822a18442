"""Process-local named locks for log-store writers."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Iterator

_LOCKS: dict[str, Lock] = {}
_LOCKS_GUARD = Lock()


def _lock_for(name: str) -> Lock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(name)
        if lock is None:
            lock = Lock()
            _LOCKS[name] = lock
    return lock


@contextmanager
def locked(name: str) -> Iterator[None]:
    """Serialize a read-then-write sequence on one named resource in this process.

    Other processes writing the same spreadsheet are not coordinated.
    """
    lock = _lock_for(name)
    with lock:
        yield
