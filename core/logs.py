"""Logger setup shared by the sync services."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from core.settings import LOGGING


def ensure_logger(name: str = "synapse.sync") -> logging.Logger:
    logger = logging.getLogger(name)
    root = logging.getLogger("synapse")
    if not root.handlers:
        LOGGING.path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOGGING.path,
            maxBytes=LOGGING.max_bytes,
            backupCount=LOGGING.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(LOGGING.level)
    return logger


__all__ = ["ensure_logger"]
