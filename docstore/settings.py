from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .atomic import FileAtomicWriter
from .codecs import JsonCodec


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StoreSettings:
    # Skip writes when a mutation leaves the document unchanged
    change_detection: bool = False

    # Indented JSON on disk (larger files, slower writes)
    pretty: bool = False

    # fsync the temp file and its directory on every write
    fsync: bool = True

    # Deep-copy values returned from access callables
    copy_results: bool = True

    def json_codec(self) -> JsonCodec:
        return JsonCodec(indent=2 if self.pretty else None)

    def writer(self) -> FileAtomicWriter:
        return FileAtomicWriter(fsync=self.fsync)


def get_settings(env_file: str | Path | None = None) -> StoreSettings:
    if env_file is not None:
        load_dotenv(env_file)

    defaults = StoreSettings()
    return StoreSettings(
        change_detection=_env_bool("DOCSTORE_CHANGE_DETECTION", defaults.change_detection),
        pretty=_env_bool("DOCSTORE_PRETTY", defaults.pretty),
        fsync=_env_bool("DOCSTORE_FSYNC", defaults.fsync),
        copy_results=_env_bool("DOCSTORE_COPY_RESULTS", defaults.copy_results),
    )
