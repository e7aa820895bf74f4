"""Logging estruturado (key=value) do motor."""

from __future__ import annotations

import logging
import sys


class KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra_data", None)
        if extra:
            data.update(extra)
        return " ".join(f"{k}={v}" for k, v in data.items())


def get_logger(name: str) -> logging.Logger:
    """
    Logger com handler único em stdout.
    Nível vem de LOG_LEVEL (ver config.get_settings).
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(KeyValueFormatter())
        logger.addHandler(handler)

        from .config import get_settings

        logger.setLevel(get_settings().log_level)
        logger.propagate = False

    return logger
