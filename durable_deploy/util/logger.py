"""
Logging setup for processes that publish scripts.

Library modules only create `logging.getLogger(__name__)` loggers; the
process entry point (`durable_deploy.deploy.publish.publish_from_settings`,
or an embedding application) calls `init_logger` once to attach handlers.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from durable_deploy.config.settings import Settings, settings as default_settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_INITIALIZED_FLAG = "_durable_deploy_inited"


class LevelColorFormatter(logging.Formatter):
    """Colors the level name of console records only."""

    COLORS = {
        logging.DEBUG: "\033[37m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers see the same record
            record.levelname = plain


def _level(settings: Settings) -> int:
    level = logging.getLevelName((settings.LOG_LEVEL or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(LevelColorFormatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(settings: Settings, level: int) -> logging.Handler:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    return handler


def init_logger(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure the root logger once per process and return the deploy logger.

    Console output goes to stderr; a size-rotated file is added when
    LOG_TO_FILE is set. Later calls return the logger without touching
    handlers.
    """
    settings = settings or default_settings
    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = _level(settings)
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    root.addHandler(_console_handler(level))
    if settings.LOG_TO_FILE:
        root.addHandler(_file_handler(settings, level))

    # Request lines from httpx would duplicate the namespace.* events
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    setattr(root, _INITIALIZED_FLAG, True)
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("logging.initialized level=%s file=%s", logging.getLevelName(level), settings.LOG_TO_FILE)
    return logger
