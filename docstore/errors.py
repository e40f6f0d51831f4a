from __future__ import annotations


class StoreError(Exception):
    """Base class for everything a Store raises on its own behalf."""


class StoreIOError(StoreError):
    """The backing file could not be read, written or replaced."""


class CodecError(StoreError):
    """Bytes did not decode to a Document, or a Document failed to encode."""


class LockError(StoreError):
    """
    The guard cannot be acquired.

    Raised once the guard is poisoned (a mutating callable raised while holding
    the exclusive lock) and on re-entrant acquisition from the owning thread.
    """
