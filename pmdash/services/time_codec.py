# Rev 0.2.0

"""Decimal hours <-> "HH:MM:SS" (Rev 0.2.0)

encode() rounds to whole seconds; decode() is permissive and answers 0 for
anything it cannot read, so callers treat 0 as "unspecified".
"""
from __future__ import annotations
import math
import re

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_STRICT_HMS = re.compile(r"^\d{2,}:[0-5]\d:[0-5]\d$")


def seconds_to_hms(seconds: float) -> str:
    total = int(seconds) if seconds > 0 else 0
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def encode(hours: float) -> str:
    """Render decimal hours as HH:MM:SS; hours may exceed 99."""
    if hours is None or not math.isfinite(hours) or hours <= 0:
        return "00:00:00"
    return seconds_to_hms(round(hours * 3600))


def _field(part: str) -> int:
    m = _LEADING_INT.match(part)
    return int(m.group(1)) if m else 0


def decode(text: str) -> float:
    if not text or not text.strip():
        return 0.0
    parts = text.split(":")
    if len(parts) != 3:
        return 0.0
    h, m, s = (_field(p) for p in parts)
    return h + m / 60 + s / 3600


def is_hms(text: str) -> bool:
    """Strict check used at the form boundary before decode()."""
    return bool(text) and _STRICT_HMS.match(text.strip()) is not None
