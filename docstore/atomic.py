from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from .errors import StoreIOError

logger = logging.getLogger(__name__)


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once: os.umask can only be queried by setting it, which is process-wide.
_UMASK = _read_umask()


def read_bytes(path: Path) -> bytes:
    """
    Read the whole backing file.

    Unlike a lenient loader, a missing or unreadable file is an error here:
    the caller decides whether absence means "use a default".
    """
    try:
        return path.read_bytes()
    except OSError as e:
        raise StoreIOError(f"failed to read {path}: {e}") from e


def _fsync_dir(directory: Path) -> None:
    # Not every platform lets you open a directory (Windows), so this stays best-effort.
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError as e:
        logger.debug("ATOMIC WRITE: cannot open %s for fsync: %r", directory, e)
        return
    try:
        os.fsync(fd)
    except OSError as e:
        logger.warning("ATOMIC WRITE: directory fsync failed for %s: %r", directory, e)
    finally:
        os.close(fd)


def _target_mode(path: Path) -> int:
    """Mode the replaced file should end up with: the existing one, else the umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def _discard(tmp_path: str) -> None:
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("ATOMIC WRITE: could not remove temp file %s: %r", tmp_path, e)


def atomic_write_bytes(path: Path, data: bytes, *, fsync: bool = True) -> None:
    """
    Atomically write bytes to disk by writing to a temp file then replacing.

    The temp file lives next to `path` so the final rename never crosses a
    filesystem boundary. Readers see either the old contents or the new ones.
    On failure the previous file is left as it was.
    An existing file keeps its permission bits; a new one gets the umask default.
    """
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise StoreIOError(f"failed to create temp file for {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            if fsync:
                os.fsync(f.fileno())
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except BaseException as e:
        _discard(tmp_path)
        if isinstance(e, OSError):
            raise StoreIOError(f"failed to write {path}: {e}") from e
        raise

    if fsync:
        _fsync_dir(directory)


class FileAtomicWriter:
    """
    Default AtomicWriter backed by `atomic_write_bytes`.
    """

    def __init__(self, *, fsync: bool = True) -> None:
        self._fsync = fsync

    @property
    def fsync(self) -> bool:
        return self._fsync

    def write_atomic(self, path: Path, data: bytes) -> None:
        atomic_write_bytes(path, data, fsync=self._fsync)
