from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict


class DataOwner(Protocol):
    """
    Opaque handle to the host context that owns a store (e.g. a plugin).
    Only its name and private data folder are ever consulted.
    """

    @property
    def name(self) -> str: ...

    @property
    def data_folder(self) -> Path: ...


class Owner(BaseModel):
    """Plain DataOwner for hosts that don't bring their own handle type."""

    model_config = ConfigDict(frozen=True)

    name: str
    data_folder: Path


class KeyValueDocumentStore(Protocol):
    """
    A single JSON object kept in memory and persisted as a whole.
    """

    def load(self) -> None:
        """Replace the in-memory document with the file's content."""
        ...

    def save(self) -> None:
        """Persist the full document atomically."""
        ...

    def get(self, key: str, shape: Any = ...) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def exists(self, key: str) -> bool: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...
