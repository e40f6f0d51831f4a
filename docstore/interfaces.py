from __future__ import annotations

from pathlib import Path
from typing import Hashable, Protocol, TypeVar

T = TypeVar("T")


class Codec(Protocol[T]):
    """
    Pure transformation between a Document and its on-disk bytes.
    """

    def encode(self, document: T) -> bytes:
        """Serialize the Document. Failures surface as CodecError."""
        ...

    def decode(self, data: bytes) -> T:
        """Deserialize bytes into a Document. Failures surface as CodecError."""
        ...


class Hasher(Protocol[T]):
    """
    Optional change-detection capability.

    Equal Documents must yield equal fingerprints. The reverse is not required:
    a collision only costs an extra write.
    """

    def fingerprint(self, document: T) -> Hashable:
        ...


class AtomicWriter(Protocol):
    def write_atomic(self, path: Path, data: bytes) -> None:
        """Replace the contents of `path` with `data`, all or nothing."""
        ...
