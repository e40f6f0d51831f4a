from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Callable, Generic, Hashable, TypeVar

from .atomic import read_bytes
from .errors import CodecError
from .hashing import SerializedHasher, hash_by_serialize
from .interfaces import AtomicWriter, Codec, Hasher
from .locks import GLOBAL_OPEN_PATHS, ReadWriteLock
from .settings import StoreSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Store(Generic[T]):
    """
    Keeps one document in memory and mirrors it to a single file on disk.

    Reads (`access`) run concurrently under a shared lock and never touch the
    disk. Mutations (`access_mut`) run one at a time under the exclusive lock
    and, unless change detection shows the document is unchanged, rewrite the
    backing file atomically before the lock is released.

    Contract for callables passed to `access` / `access_mut`:

    - They receive the live document and must not keep a reference to it (or to
      anything inside it) after they return. By default the value they return is
      deep-copied before it leaves the lock, so returning `doc.items` is safe.
    - `access` callables must not mutate the document.
    - They must not call back into the same store. Doing so raises LockError.
    - If an `access_mut` callable raises, nothing is written, the exception is
      propagated, and the store is poisoned: every later call raises LockError.

    If persisting fails (CodecError / StoreIOError from `access_mut`), the file
    keeps its previous contents but the in-memory document keeps the mutation.
    The next successful write brings the two back in line.

    The same holds when the value returned by an `access_mut` callable cannot be
    deep-copied: the call raises before anything is written, without poisoning.
    """

    def __init__(
        self,
        document: T,
        path: Path,
        codec: Codec[T],
        *,
        hasher: Hasher[T] | None = None,
        change_detection: bool | None = None,
        writer: AtomicWriter | None = None,
        copy_results: bool | None = None,
        settings: StoreSettings | None = None,
    ) -> None:
        """Wrap an already-loaded document. Does not touch the disk."""
        settings = settings or StoreSettings()
        if change_detection is None:
            change_detection = hasher is not None or settings.change_detection
        if not change_detection:
            hasher = None
        elif hasher is None:
            hasher = SerializedHasher(codec)

        self._document = document
        self._path = Path(path)
        self._codec = codec
        self._hasher = hasher
        self._writer = writer or settings.writer()
        self._copy_results = settings.copy_results if copy_results is None else copy_results
        self._lock = ReadWriteLock()

        GLOBAL_OPEN_PATHS.register(self._path, self)

    @classmethod
    def from_file(cls, path: Path | str, codec: Codec[T], **options: Any) -> "Store[T]":
        """
        Load the document from an existing file.

        Raises StoreIOError if the file cannot be read (or does not exist) and
        CodecError if its contents do not decode.
        """
        path = Path(path)
        document = codec.decode(read_bytes(path))
        logger.debug("STORE OPEN: loaded %s", path)
        return cls(document, path, codec, **options)

    @classmethod
    def from_file_or_default(cls, path: Path | str, codec: Codec[T], default: T, **options: Any) -> "Store[T]":
        """
        Load the document from `path`, or create the file from `default`.

        Only a missing file falls back to the default. A file that exists but
        does not decode raises CodecError and is left untouched.
        """
        path = Path(path)
        if path.exists():
            return cls.from_file(path, codec, **options)
        logger.info("STORE OPEN: %s not found, creating it from the default document", path)
        return cls.create(path, codec, default, **options)

    @classmethod
    def create(cls, path: Path | str, codec: Codec[T], document: T, **options: Any) -> "Store[T]":
        """Persist `document` to `path` immediately (replacing any existing file)."""
        store = cls(document, Path(path), codec, **options)
        with store._lock.write():
            store._persist_locked()
        return store

    @property
    def path(self) -> Path:
        return self._path

    @property
    def codec(self) -> Codec[T]:
        return self._codec

    @property
    def change_detection(self) -> bool:
        return self._hasher is not None

    @property
    def poisoned(self) -> bool:
        return self._lock.poisoned

    def access(self, fn: Callable[[T], R]) -> R:
        """Run `fn` against the document under the shared lock. No disk I/O."""
        with self._lock.read():
            return self._export(fn(self._document))

    def access_mut(self, fn: Callable[[T], R]) -> R:
        """
        Run `fn` against the document under the exclusive lock, then persist.

        With change detection enabled the write is skipped when the document's
        fingerprint is the same before and after `fn`.
        """
        with self._lock.write():
            try:
                _, before = self._fingerprint()
            except CodecError as e:
                # An earlier failed write left something unencodable behind; force a write.
                logger.debug("STORE WRITE: cannot fingerprint %s before mutation: %r", self._path, e)
                before = None

            try:
                result = fn(self._document)
            except BaseException:
                self._lock.poison()
                logger.warning("STORE POISONED: mutation of %s raised; store is now unusable", self._path)
                raise

            # An uncopyable result must fail the call before anything reaches disk.
            exported = self._export(result)

            payload, after = self._fingerprint()
            if before is not None and after == before:
                logger.debug("STORE WRITE: %s unchanged, skipping write", self._path)
            else:
                self._persist_locked(payload)
            return exported

    def _fingerprint(self) -> tuple[bytes | None, Hashable | None]:
        """Return (encoded payload if it was produced along the way, fingerprint)."""
        hasher = self._hasher
        if hasher is None:
            return None, None
        if isinstance(hasher, SerializedHasher) and hasher.codec is self._codec:
            return hash_by_serialize(self._codec, self._document, algorithm=hasher.algorithm)
        return None, hasher.fingerprint(self._document)

    def _persist_locked(self, payload: bytes | None = None) -> None:
        # Caller must hold the exclusive lock.
        if payload is None:
            payload = self._codec.encode(self._document)
        self._writer.write_atomic(self._path, payload)
        logger.debug("STORE WRITE: wrote %d bytes to %s", len(payload), self._path)

    def _export(self, value: R) -> R:
        return copy.deepcopy(value) if self._copy_results else value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self._path)!r}, change_detection={self.change_detection})"
