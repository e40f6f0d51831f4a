from __future__ import annotations

from .async_store import AsyncStore
from .atomic import FileAtomicWriter, atomic_write_bytes, read_bytes
from .codecs import JsonCodec, PydanticCodec
from .errors import CodecError, LockError, StoreError, StoreIOError
from .hashing import SerializedHasher, hash_by_serialize
from .interfaces import AtomicWriter, Codec, Hasher
from .locks import ReadWriteLock
from .settings import StoreSettings, get_settings
from .store import Store

__all__ = [
    "Store",
    "AsyncStore",
    "StoreSettings",
    "get_settings",
    "Codec",
    "JsonCodec",
    "PydanticCodec",
    "Hasher",
    "SerializedHasher",
    "hash_by_serialize",
    "AtomicWriter",
    "FileAtomicWriter",
    "atomic_write_bytes",
    "read_bytes",
    "ReadWriteLock",
    "StoreError",
    "StoreIOError",
    "CodecError",
    "LockError",
]
