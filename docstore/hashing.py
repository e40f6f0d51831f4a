from __future__ import annotations

import hashlib
from typing import Any

from .interfaces import Codec


def hash_by_serialize(codec: Codec[Any], document: Any, *, algorithm: str = "sha256") -> tuple[bytes, str]:
    """
    Encode `document` and hash the encoding.

    Returns both so a caller that goes on to persist the document can reuse the
    payload instead of encoding it again.
    """
    payload = codec.encode(document)
    return payload, hashlib.new(algorithm, payload).hexdigest()


class SerializedHasher:
    """
    Fingerprints a document by hashing its codec encoding.

    Correct as long as the codec is deterministic (equal documents encode to
    equal bytes). A non-canonical codec only causes redundant writes.
    """

    def __init__(self, codec: Codec[Any], *, algorithm: str = "sha256") -> None:
        hashlib.new(algorithm)  # fail fast on unknown algorithm names
        self._codec = codec
        self.algorithm = algorithm

    @property
    def codec(self) -> Codec[Any]:
        return self._codec

    def fingerprint(self, document: Any) -> str:
        _, digest = hash_by_serialize(self._codec, document, algorithm=self.algorithm)
        return digest
