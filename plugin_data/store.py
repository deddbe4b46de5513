from __future__ import annotations

import copy
import functools
import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from .autosave import AutoSaver, ErrorHook
from .errors import DeserializationError
from .interfaces import DataOwner, KeyValueDocumentStore
from .json_codec import JsonCodec, atomic_write_text, read_document
from .locks import GLOBAL_PATH_LOCKS
from .paths import StorageLocation, coerce_location, database_file, ensure_file, resolve_directory
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """
    Result of ``DocumentStore.get``: either absent, or present with a value
    (which may be None when the stored value is JSON null).
    """

    present: bool
    value: T | None = None

    def unwrap(self) -> T:
        if not self.present:
            raise LookupError("no value stored under this key")
        return self.value  # type: ignore[return-value]

    def or_else(self, default: Any) -> Any:
        return self.value if self.present else default

    def __bool__(self) -> bool:
        return self.present


ABSENT: Lookup[Any] = Lookup(False)


@functools.lru_cache(maxsize=256)
def _cached_adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def _adapter_for(shape: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(shape)
    except TypeError:
        # unhashable shape (e.g. a parametrized Annotated with dict metadata)
        return TypeAdapter(shape)


class DocumentStore(KeyValueDocumentStore):
    """
    A JSON object held in memory and persisted to ``<directory>/<database>.json``.

    - The document is never None; missing, empty or ``null`` files load as ``{}``.
    - Every access to the document goes through one lock, so autosave never
      serializes a half-mutated document and ``load`` never races ``set``.
    - File I/O is additionally serialized per path, across instances.
    - A present file that isn't a JSON object is an error, never silently dropped.
    """

    def __init__(
        self,
        owner: DataOwner,
        database: str,
        location: StorageLocation | str,
        *,
        codec: JsonCodec | None = None,
        settings: Settings | None = None,
    ):
        if not isinstance(database, str) or not database:
            raise ValueError("database name must be a non-empty string")
        self._owner = owner
        self._database = database
        self._location = coerce_location(location)
        self._codec = codec if codec is not None else JsonCodec()

        shared = settings.shared_root if settings is not None else None
        self._directory = resolve_directory(self._location, owner, shared=shared)
        self._path = database_file(self._directory, database)

        self._lock = threading.RLock()
        self._file_lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        self._data: dict[str, Any] = {}

        self.autosave: AutoSaver | None = None

        # Construction fails as a whole if the initial load fails.
        self.load()

    # ------------------------------------------------------------------
    # binding
    # ------------------------------------------------------------------
    @property
    def owner(self) -> DataOwner:
        return self._owner

    @property
    def database(self) -> str:
        return self._database

    @property
    def location(self) -> StorageLocation:
        return self._location

    @property
    def codec(self) -> JsonCodec:
        return self._codec

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # typed access
    # ------------------------------------------------------------------
    def get(self, key: str, shape: Any = Any) -> Lookup[Any]:
        """
        Read ``key`` as ``shape`` (any type pydantic can validate).

        Returns ``ABSENT`` when the key isn't stored. A stored value that doesn't
        fit ``shape`` raises DeserializationError; no lax coercion (``"42"`` is not an int).
        """
        with self._lock:
            if key not in self._data:
                return ABSENT
            text = json.dumps(self._data[key], ensure_ascii=False)
        try:
            value = _adapter_for(shape).validate_json(text, strict=True)
        except ValidationError as e:
            raise DeserializationError(key, shape, str(e)) from e
        return Lookup(True, value)

    def get_or(self, key: str, shape: Any, default: Any = None) -> Any:
        return self.get(key, shape).or_else(default)

    def set(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"keys must be str, not {type(key).__name__}")
        tree = self._codec.to_tree(value, key=key)
        with self._lock:
            self._data[key] = tree

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data = {}

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the current document."""
        with self._lock:
            return copy.deepcopy(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    def ensure_path(self) -> Path:
        """Create the data directory and an empty data file if missing."""
        return ensure_file(self._path)

    def load(self) -> None:
        with self._file_lock:
            self.ensure_path()
            doc = read_document(self._path, self._codec)
        with self._lock:
            self._data = doc
        logger.debug("LOAD %s: %d keys", self._path, len(doc))

    def save(self) -> None:
        # The snapshot is taken under the file lock, so writes land in snapshot order.
        with self._file_lock:
            with self._lock:
                text = self._codec.encode(self._data)
                count = len(self._data)
            self.ensure_path()
            atomic_write_text(self._path, text)
        logger.debug("SAVE %s: %d keys", self._path, count)

    def start_autosave(self, interval: float, *, on_error: ErrorHook | None = None) -> AutoSaver:
        if self.autosave is None:
            self.autosave = AutoSaver(
                self.save,
                interval,
                on_error=on_error,
                name=f"autosave-{self._database}",
            ).start()
        return self.autosave

    # ------------------------------------------------------------------
    # identity
    # ------------------------------------------------------------------
    def _identity(self) -> tuple[Any, ...]:
        return (self._codec, self._location, self._owner, self._database)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, DocumentStore):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        return (
            f"DocumentStore(codec={self._codec!r}, location={self._location.name}, "
            f"owner={self._owner!r}, database={self._database!r})"
        )


def initialize(
    owner: DataOwner,
    database: str,
    location: StorageLocation | str,
    auto_save: bool = False,
    *,
    settings: Settings | None = None,
    on_autosave_error: ErrorHook | None = None,
) -> DocumentStore:
    """
    Build a store with the default serializer configuration, load it, and
    optionally start saving it every ``settings.autosave_interval`` seconds.
    """
    settings = settings or get_settings()
    store = DocumentStore(
        owner,
        database,
        location,
        codec=JsonCodec(indent=settings.json_indent),
        settings=settings,
    )
    if auto_save:
        store.start_autosave(settings.autosave_interval, on_error=on_autosave_error)
    return store
