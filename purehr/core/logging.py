from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .constants import APP_NAME

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

def setup_logging(log_dir: Path, level: int = logging.INFO) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{APP_NAME.lower()}.log"

    root = logging.getLogger()
    root.setLevel(level)

    # évite les doublons si l'appli est relancée dans le même process
    for handler in list(root.handlers):
        if getattr(handler, "_purehr", False):
            root.removeHandler(handler)
            handler.close()

    # Console
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(FORMAT, DATEFMT))

    # Fichier tournant
    fh = RotatingFileHandler(logfile, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(FORMAT, DATEFMT))

    for handler in (ch, fh):
        handler._purehr = True
        root.addHandler(handler)
    return logfile
