from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for `import docstore` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from docstore.atomic import FileAtomicWriter  # noqa: E402


class CountingWriter:
    """Real atomic writer that records every call."""

    def __init__(self) -> None:
        self._inner = FileAtomicWriter(fsync=False)
        self.calls: list[tuple[Path, bytes]] = []

    def write_atomic(self, path: Path, data: bytes) -> None:
        self.calls.append((path, data))
        self._inner.write_atomic(path, data)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """
    Backing file location inside a temp directory so tests never touch the repo.
    """
    return tmp_path / "d.dat"


@pytest.fixture
def counting_writer() -> CountingWriter:
    return CountingWriter()
