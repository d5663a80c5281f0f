from __future__ import annotations
import os
from pathlib import Path

APP_NAME = "LineCross"

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]

def _ensure(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p

def user_data_dir() -> Path:
    """
    Per-user state for the intersection server (rotating logs, settings.json).
    Resolved from LOCALAPPDATA, then APPDATA, then the home directory.
    """
    root = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
    return _ensure(Path(root) / APP_NAME)

def logs_dir() -> Path:
    return _ensure(user_data_dir() / "logs")

def settings_path() -> Path:
    return user_data_dir() / "settings.json"

def default_reference_path() -> Path:
    """Sample scattered-lines document shipped inside the package."""
    return _PACKAGE_ROOT / "data" / "scattered_lines.json"
