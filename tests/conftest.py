from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def sandbox_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point the shared root at a temp directory so tests never touch the real cwd.
    """
    root = tmp_path / "server"
    monkeypatch.setenv("PLUGIN_DATA_SHARED_ROOT", str(root))
    monkeypatch.delenv("PLUGIN_DATA_AUTOSAVE_INTERVAL", raising=False)
    monkeypatch.delenv("PLUGIN_DATA_JSON_INDENT", raising=False)
    return root


@pytest.fixture
def owner(tmp_path: Path):
    from plugin_data import Owner

    return Owner(name="ScoresPlugin", data_folder=tmp_path / "plugins" / "ScoresPlugin")
