from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from .errors import StorageIOError, UnknownLocationKind
from .interfaces import DataOwner
from .settings import get_settings


class StorageLocation(str, Enum):
    # The host's top-level working directory, shared by every owner.
    SHARED_ROOT = "shared_root"
    # The owner's own data folder.
    OWNER_PRIVATE = "owner_private"


def shared_root() -> Path:
    return get_settings().shared_root


def owner_dir(owner: DataOwner) -> Path:
    return Path(owner.data_folder)


def coerce_location(location: Any) -> StorageLocation:
    if isinstance(location, StorageLocation):
        return location
    try:
        return StorageLocation(location)
    except ValueError:
        raise UnknownLocationKind(location) from None


def resolve_directory(
    location: StorageLocation | str,
    owner: DataOwner,
    *,
    shared: Path | None = None,
) -> Path:
    """
    Map a storage location to its directory. Touches nothing on disk.

    ``shared`` overrides the configured shared root for SHARED_ROOT.
    """
    kind = coerce_location(location)
    if kind is StorageLocation.SHARED_ROOT:
        return Path(shared) if shared is not None else shared_root()
    if kind is StorageLocation.OWNER_PRIVATE:
        return owner_dir(owner)
    raise UnknownLocationKind(location)


def database_file(directory: Path, database: str) -> Path:
    return directory / f"{database}.json"


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError("Failed to create data directory", path) from e
    return path


def ensure_file(path: Path) -> Path:
    """Create ``path`` empty if it is missing. An existing file is not opened or touched."""
    ensure_dir(path.parent)
    try:
        with path.open("x", encoding="utf-8"):
            pass
    except FileExistsError:
        pass
    except OSError as e:
        raise StorageIOError("Failed to create data file", path) from e
    return path
