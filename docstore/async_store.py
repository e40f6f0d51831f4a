from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from .interfaces import Codec
from .store import Store

T = TypeVar("T")
R = TypeVar("R")


class AsyncStore(Generic[T]):
    """
    Async wrapper around a Store.
    Uses asyncio.to_thread to avoid blocking the event loop on lock waits and file I/O.

    Callables still run synchronously on the worker thread while the lock is
    held, so they must not await anything or call back into the store.
    """

    def __init__(self, store: Store[T]) -> None:
        self._store = store

    @property
    def store(self) -> Store[T]:
        return self._store

    @classmethod
    async def from_file(cls, path: Path | str, codec: Codec[T], **options: Any) -> "AsyncStore[T]":
        return cls(await asyncio.to_thread(Store.from_file, path, codec, **options))

    @classmethod
    async def from_file_or_default(
        cls, path: Path | str, codec: Codec[T], default: T, **options: Any
    ) -> "AsyncStore[T]":
        return cls(await asyncio.to_thread(Store.from_file_or_default, path, codec, default, **options))

    async def access(self, fn: Callable[[T], R]) -> R:
        return await asyncio.to_thread(self._store.access, fn)

    async def access_mut(self, fn: Callable[[T], R]) -> R:
        return await asyncio.to_thread(self._store.access_mut, fn)
