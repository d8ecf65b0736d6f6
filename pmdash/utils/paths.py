# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Uses XDG Base Directory spec
- Logs/state/config remain under XDG dirs
- DB lives in the project repo at ./data/pmdash.db unless PMDASH_DB is set
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "pmdash"


XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


# XDG config location; logs resolve XDG_STATE_HOME at setup time
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


# Project-relative locations
RUNTIME_ROOT = Path(__file__).resolve().parents[2]
PROJECT_DATA_DIR = (RUNTIME_ROOT / "data").resolve()
MIGRATIONS_DIR = (PROJECT_DATA_DIR / "migrations").resolve()


DB_PATH = Path(os.environ.get("PMDASH_DB", PROJECT_DATA_DIR / "pmdash.db"))


def config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR
