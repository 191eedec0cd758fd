"""Logging helpers."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from .config import Config


def resolve_level(config: Config) -> int:
    if config.debug_logging:
        return logging.DEBUG
    level = logging.getLevelName(str(config.logging.level).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: Config) -> tuple[logging.Logger, str]:
    os.makedirs(config.log_dir, exist_ok=True)
    log_path = os.path.join(config.log_dir, config.logging.filename)

    logger = logging.getLogger("studynote")
    logger.setLevel(resolve_level(config))

    existing = [
        h for h in logger.handlers
        if isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_path)
    ]
    if not existing:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        handler = RotatingFileHandler(
            log_path,
            maxBytes=config.logging.max_bytes,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        fmt = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    return logger, log_path
