# Rev 0.2.0

"""Settings service + display formatting (Rev 0.2.0)

Settings are user-scoped and persisted as one JSON record through an injected
key-value storage. Formatter reads the current settings on every call, so an
update is visible to all formatting from that point on.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, replace
from typing import Callable, List, Optional

from PySide6.QtCore import QLocale

from ..models.types import TIME_FORMATS, TimeFormat
from ..utils.config import KeyValueStorage
from . import time_codec

log = logging.getLogger(__name__)

SETTINGS_KEY = "projectSettings"

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
_DECIMAL = re.compile(r"[^\d.]")

# Symbols for the codes users pick most; anything else, including the other
# dollar-sign currencies, renders its ISO code.
CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "US$",
    "GBP": "£",
    "JPY": "¥",
    "CHF": "CHF",
    "BRL": "R$",
    "INR": "₹",
}


@dataclass(frozen=True)
class Settings:
    currency: str = "EUR"
    time_format: TimeFormat = "hms"

    def to_json(self) -> str:
        return json.dumps({"currency": self.currency, "timeFormat": self.time_format})


def _settings_from_json(text: str) -> Settings:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("settings record is not an object")
    base = Settings()
    currency = data.get("currency", base.currency)
    time_format = data.get("timeFormat", base.time_format)
    if not isinstance(currency, str) or not _CURRENCY_CODE.match(currency):
        currency = base.currency
    if time_format not in TIME_FORMATS:
        time_format = base.time_format
    return Settings(currency=currency, time_format=time_format)


class SettingsService:
    def __init__(self, storage: KeyValueStorage, key: str = SETTINGS_KEY):
        self._storage = storage
        self._key = key
        self._listeners: List[Callable[[Settings], None]] = []
        self._settings = self._load()

    def _load(self) -> Settings:
        raw = self._storage.get_item(self._key)
        if not raw:
            return Settings()
        try:
            return _settings_from_json(raw)
        except ValueError:
            log.warning("Unparseable settings under %r; using defaults", self._key)
            return Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def subscribe(self, fn: Callable[[Settings], None]) -> None:
        self._listeners.append(fn)

    def unsubscribe(self, fn: Callable[[Settings], None]) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def update_settings(self, *, currency: Optional[str] = None, time_format: Optional[str] = None) -> Settings:
        """Merge the given fields into the current settings and persist the whole record."""
        changes = {}
        if currency is not None:
            code = currency.strip().upper()
            if not _CURRENCY_CODE.match(code):
                raise ValueError(f"invalid currency code: {currency!r}")
            changes["currency"] = code
        if time_format is not None:
            if time_format not in TIME_FORMATS:
                raise ValueError(f"invalid time format: {time_format!r}")
            changes["time_format"] = time_format

        merged = replace(self._settings, **changes)
        self._storage.set_item(self._key, merged.to_json())
        self._settings = merged
        log.info("Settings updated: %s", asdict(merged))
        for fn in list(self._listeners):
            fn(merged)
        return merged


class Formatter:
    def __init__(self, settings: SettingsService, locale: str = "es_ES"):
        self._settings = settings
        self._locale = QLocale(locale)

    @property
    def settings(self) -> Settings:
        return self._settings.settings

    def on_settings_changed(self, fn: Callable[[Settings], None]) -> None:
        self._settings.subscribe(fn)

    def remove_settings_listener(self, fn: Callable[[Settings], None]) -> None:
        self._settings.unsubscribe(fn)

    def currency_symbol(self) -> str:
        code = self.settings.currency
        return CURRENCY_SYMBOLS.get(code, code)

    def format_time(self, hours: float) -> str:
        if self.settings.time_format == "decimal":
            return f"{hours:.2f}h"
        return time_codec.encode(hours)

    def format_currency(self, amount: float) -> str:
        return self._locale.toCurrencyString(float(amount), self.currency_symbol())

    def parse_time_to_hours(self, text: str) -> float:
        """Accept either HH:MM:SS or a decimal figure such as "2.5h"."""
        if not text:
            return 0.0
        if ":" in text:
            return time_codec.decode(text)
        try:
            return float(_DECIMAL.sub("", text))
        except ValueError:
            return 0.0
