# pmdash/utils/config.py
# Rev 0.2.0
"""Durable client-side storage.

`JsonFileStorage` behaves like a browser's local key-value storage: string
keys, string values, the whole record rewritten on every write. The
settings service only sees the `KeyValueStorage` protocol, so tests run
against `MemoryStorage`.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .paths import config_dir

log = logging.getLogger(__name__)

SETTINGS_FILE = config_dir() / "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "display": {
        "locale": "es_ES",
    },
    "timer": {
        "tick_interval_ms": 1000,
    },
    "logging": {
        "level": "INFO",
        "levels": {},
    },
}


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStorage:
    """String-keyed record persisted as one JSON object on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("Unreadable storage file %s; starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def default_storage() -> JsonFileStorage:
    return JsonFileStorage(config_dir() / "storage.json")


def load_settings() -> Dict[str, Any]:
    if SETTINGS_FILE.exists():
        try:
            return {**_DEFAULTS, **json.loads(SETTINGS_FILE.read_text())}
        except (OSError, ValueError):
            return _DEFAULTS.copy()
    return _DEFAULTS.copy()
