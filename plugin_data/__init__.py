from __future__ import annotations

from .async_store import AsyncDocumentStore
from .autosave import AutoSaver
from .errors import (
    DeserializationError,
    MalformedDocumentError,
    PluginDataError,
    SerializationError,
    StorageIOError,
    UnknownLocationKind,
)
from .interfaces import DataOwner, KeyValueDocumentStore, Owner
from .json_codec import JsonCodec
from .paths import StorageLocation, resolve_directory
from .settings import Settings, get_settings
from .store import ABSENT, DocumentStore, Lookup, initialize

__all__ = [
    "ABSENT",
    "AsyncDocumentStore",
    "AutoSaver",
    "DataOwner",
    "DeserializationError",
    "DocumentStore",
    "JsonCodec",
    "KeyValueDocumentStore",
    "Lookup",
    "MalformedDocumentError",
    "Owner",
    "PluginDataError",
    "SerializationError",
    "Settings",
    "StorageIOError",
    "StorageLocation",
    "UnknownLocationKind",
    "get_settings",
    "initialize",
    "resolve_directory",
]
