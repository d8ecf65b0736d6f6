# Rev 0.2.0

# pmdash – logging setup
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .config import load_settings

try:
    # Optional: pipe Qt messages into Python logging if Qt exists
    from PySide6.QtCore import qInstallMessageHandler, QtMsgType
    def _qt_handler(msg_type, context, message):
        lvl = {
            QtMsgType.QtDebugMsg: logging.DEBUG,
            QtMsgType.QtInfoMsg: logging.INFO,
            QtMsgType.QtWarningMsg: logging.WARNING,
            QtMsgType.QtCriticalMsg: logging.ERROR,
            QtMsgType.QtFatalMsg: logging.CRITICAL,
        }.get(msg_type, logging.INFO)
        logging.getLogger(f"{APP_NAME}.qt").log(lvl, message)
except ImportError:
    qInstallMessageHandler = None  # PySide6 not available at import time

APP_NAME = "pmdash"

_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# marks the handlers installed here so a second setup replaces them
_OWNED = "_pmdash_handler"


def _state_dir(app: str = APP_NAME) -> Path:
    base = os.environ.get("XDG_STATE_HOME", os.path.expanduser("~/.local/state"))
    d = Path(base) / app / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _level(name: Any, default: int = logging.INFO) -> int:
    value = getattr(logging, str(name).upper(), None)
    return value if isinstance(value, int) else default


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(APP_NAME):
        name = f"{APP_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(app_name: str = APP_NAME, settings: Optional[Mapping[str, Any]] = None) -> Path:
    """
    Root level: PMDASH_LOG_LEVEL, else settings["logging"]["level"], else INFO.
    settings["logging"]["levels"] maps logger names (e.g. "pmdash.repositories")
    to their own level, so a noisy layer can be turned down on its own.
    """
    cfg: Dict[str, Any] = dict((settings if settings is not None else load_settings()).get("logging") or {})
    level_name = os.environ.get("PMDASH_LOG_LEVEL") or cfg.get("level") or "INFO"
    level = _level(level_name)

    logfile = _state_dir(app_name) / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(level)
    for h in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(h)
        h.close()

    # File: rotate at 5MB, keep 7 backups
    fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
    ch = logging.StreamHandler(sys.stdout)
    for h in (fh, ch):
        h.setFormatter(logging.Formatter(_FMT, _DATEFMT))
        h.setLevel(level)
        setattr(h, _OWNED, True)
        root.addHandler(h)

    for name, lvl in (cfg.get("levels") or {}).items():
        get_logger(name).setLevel(_level(lvl, level))

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        get_logger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    if qInstallMessageHandler is not None:
        qInstallMessageHandler(_qt_handler)

    get_logger(__name__).info("Logging initialized at %s; file: %s", logging.getLevelName(level), logfile)
    return logfile
