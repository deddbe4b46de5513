from __future__ import annotations

from pathlib import Path
from typing import Any


class PluginDataError(Exception):
    """Base class for every error raised by plugin_data."""


class UnknownLocationKind(PluginDataError, ValueError):
    def __init__(self, location: Any):
        super().__init__(f"Failed to find respective data folder location for: {location!r}")
        self.location = location


class StorageIOError(PluginDataError):
    """
    Reading, writing or creating the backing file (or its directory) failed.
    The underlying OSError is always chained as __cause__.
    """

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path


class MalformedDocumentError(PluginDataError, ValueError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Malformed JSON document at {path}: {reason}")
        self.path = path
        self.reason = reason


class DeserializationError(PluginDataError, ValueError):
    def __init__(self, key: str, shape: Any, reason: str):
        super().__init__(f"Value at {key!r} does not match {shape!r}: {reason}")
        self.key = key
        self.shape = shape
        self.reason = reason


class SerializationError(PluginDataError, ValueError):
    def __init__(self, key: str | None, reason: str):
        where = f" for {key!r}" if key is not None else ""
        super().__init__(f"Value{where} is not representable as JSON: {reason}")
        self.key = key
        self.reason = reason
