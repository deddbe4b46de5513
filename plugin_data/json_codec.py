from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic_core import PydanticSerializationError

from .errors import MalformedDocumentError, SerializationError, StorageIOError

# inf/nan pass through untouched so json.dumps(allow_nan=False) can reject them
# instead of pydantic quietly turning them into null.
_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any, config=ConfigDict(ser_json_inf_nan="constants"))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


class JsonCodec(BaseModel):
    """
    Serializer configuration for a document file.

    Output never escapes non-ASCII or HTML-sensitive characters and always
    keeps explicit nulls. NaN and Infinity are rejected in both directions.
    """

    model_config = ConfigDict(frozen=True)

    indent: int | None = None
    sort_keys: bool = False

    def to_tree(self, value: Any, *, key: str | None = None) -> Any:
        """
        Convert ``value`` into a detached tree of dict/list/str/int/float/bool/None.

        Anything pydantic can serialize is accepted (models, dataclasses, enums,
        datetimes, tuples, sets...). The result shares no containers with ``value``.
        """
        try:
            jsonable = _ANY_ADAPTER.dump_python(value, mode="json")
            text = json.dumps(jsonable, ensure_ascii=False, allow_nan=False)
        except (PydanticSerializationError, TypeError, ValueError, RecursionError) as e:
            raise SerializationError(key, str(e)) from e
        return json.loads(text)

    def encode(self, document: dict[str, Any]) -> str:
        separators = (",", ":") if self.indent is None else (",", ": ")
        try:
            return json.dumps(
                document,
                ensure_ascii=False,
                allow_nan=False,
                indent=self.indent,
                sort_keys=self.sort_keys,
                separators=separators,
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(None, str(e)) from e

    def decode(self, text: str) -> Any:
        return json.loads(text, parse_constant=_reject_constant)


def read_document(path: Path, codec: JsonCodec) -> dict[str, Any]:
    """
    Read a JSON object from ``path``.

    Empty content and a top-level ``null`` both mean "no data" and yield ``{}``.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise StorageIOError("Failed to read JSON data", path) from e

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedDocumentError(path, f"not UTF-8 ({e.reason})") from e
    if not text.strip():
        return {}

    try:
        doc = codec.decode(text)
    except (ValueError, RecursionError) as e:
        raise MalformedDocumentError(path, str(e)) from e

    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise MalformedDocumentError(path, f"top-level value is {type(doc).__name__}, expected object")
    return doc


def atomic_write_text(path: Path, text: str) -> None:
    """
    Atomically replace ``path`` with ``text`` by writing a temp file then renaming it.

    The previous content survives any failure before the rename.
    """
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise StorageIOError("Failed to write JSON data", path) from e
