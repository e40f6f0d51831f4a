from __future__ import annotations

import json
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from .errors import CodecError

T = TypeVar("T")


class JsonCodec:
    """
    Plain JSON documents (dicts, lists, scalars) via the standard library.

    Keys are sorted by default so equal documents always encode to equal bytes,
    which is what `SerializedHasher` relies on. `indent=2` gives the
    human-readable "pretty" layout.
    """

    def __init__(self, *, indent: int | None = None, sort_keys: bool = True) -> None:
        self.indent = indent
        self.sort_keys = sort_keys

    def encode(self, document: Any) -> bytes:
        try:
            text = json.dumps(document, indent=self.indent, sort_keys=self.sort_keys, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CodecError(f"failed to encode document as JSON: {e}") from e
        if self.indent is not None:
            text += "\n"
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"failed to decode JSON document: {e}") from e


class PydanticCodec(Generic[T]):
    """
    Typed documents validated by pydantic.

    Anything a `TypeAdapter` accepts works as the document type: a `BaseModel`,
    a dataclass, `dict[str, int]`, ...
    """

    def __init__(self, type_: type[T] | Any, *, indent: int | None = None) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)
        self.indent = indent

    def encode(self, document: T) -> bytes:
        try:
            return self._adapter.dump_json(document, indent=self.indent)
        except (ValidationError, TypeError, ValueError) as e:
            raise CodecError(f"failed to encode document: {e}") from e

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise CodecError(f"document does not match schema: {e}") from e
