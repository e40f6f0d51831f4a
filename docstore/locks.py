from __future__ import annotations

import contextlib
import logging
import threading
import weakref
from pathlib import Path
from typing import Any, Iterator

from .errors import LockError

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """
    Shared-exclusive lock with a terminal poisoned state.

    - Any number of readers, or exactly one writer.
    - Waiting writers block new readers so a steady read load cannot starve them.
    - Not re-entrant: acquiring again from a thread that already holds the lock
      (in either mode) raises LockError rather than deadlocking.
    - Once poisoned, every pending and future acquisition raises LockError.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers: set[int] = set()
        self._writer: int | None = None
        self._writers_waiting = 0
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        with self._cond:
            return self._poisoned

    def poison(self) -> None:
        with self._cond:
            self._poisoned = True
            self._cond.notify_all()

    def _check_usable(self, me: int) -> None:
        if self._poisoned:
            raise LockError("lock is poisoned by an earlier failed mutation")
        if self._writer == me or me in self._readers:
            raise LockError("re-entrant acquisition of the same store is not supported")

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            self._check_usable(me)
            while self._writer is not None or self._writers_waiting:
                self._cond.wait()
                if self._poisoned:
                    raise LockError("lock was poisoned while waiting")
            self._readers.add(me)

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if me not in self._readers:
                raise RuntimeError("release_read() called without holding the read lock")
            self._readers.discard(me)
            if not self._readers:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            self._check_usable(me)
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
                    if self._poisoned:
                        raise LockError("lock was poisoned while waiting")
            finally:
                self._writers_waiting -= 1
                if self._poisoned:
                    self._cond.notify_all()
            self._writer = me

    def release_write(self) -> None:
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError("release_write() called without holding the write lock")
            self._writer = None
            self._cond.notify_all()

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class OpenPathRegistry:
    """
    Tracks which live stores own which backing files.

    A backing file should be managed by one store per process. A second store
    on the same resolved path is allowed but logged, since its writes will
    silently overwrite the first one's.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._owners: weakref.WeakValueDictionary[str, Any] = weakref.WeakValueDictionary()

    def register(self, path: Path, owner: Any) -> None:
        key = str(path.resolve())
        with self._guard:
            existing = self._owners.get(key)
            if existing is not None and existing is not owner:
                logger.warning("STORE OPEN: %s is already managed by another live store", key)
            self._owners[key] = owner

    def owner_of(self, path: Path) -> Any | None:
        with self._guard:
            return self._owners.get(str(path.resolve()))


GLOBAL_OPEN_PATHS = OpenPathRegistry()
