from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_INTERVAL = 1.0


def _env_indent(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("SETTINGS: ignoring non-integer %s=%r", name, raw)
        return None
    if value < 0:
        logger.warning("SETTINGS: %s must not be negative (got %r); using compact output", name, raw)
        return None
    return value


def _env_interval(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("SETTINGS: ignoring non-numeric %s=%r", name, raw)
        return default
    if value <= 0:
        logger.warning("SETTINGS: %s must be positive (got %r); using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class Settings:
    # Directory used by StorageLocation.SHARED_ROOT
    shared_root: Path

    # Seconds between autosave runs
    autosave_interval: float

    # None writes compact JSON
    json_indent: int | None


def get_settings(env_file: str | Path | None = None) -> Settings:
    if env_file is not None:
        # Variables already present in the environment win over the file.
        load_dotenv(env_file, override=False)

    raw_root = os.getenv("PLUGIN_DATA_SHARED_ROOT", "").strip()
    shared_root = Path(raw_root).expanduser() if raw_root else Path.cwd()

    autosave_interval = _env_interval("PLUGIN_DATA_AUTOSAVE_INTERVAL", DEFAULT_AUTOSAVE_INTERVAL)
    json_indent = _env_indent("PLUGIN_DATA_JSON_INDENT")

    return Settings(
        shared_root=shared_root,
        autosave_interval=autosave_interval,
        json_indent=json_indent,
    )
