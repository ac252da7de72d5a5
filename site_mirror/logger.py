# site_mirror/logger.py
"""
Logging for SiteMirror.

Every module logs through the one named logger exported here::

    from site_mirror.logger import logger

Importing the module installs no output handler, so the crawler stays quiet
when embedded. The CLI calls :func:`init_logging` to attach a stdout handler
and, optionally, an append-mode rotating log file shared by successive runs.
Each run opens with :func:`start_banner` so its lines can be told apart in
that shared file.
"""
from __future__ import annotations

import logging
import secrets
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "SiteMirror"
# worker threads interleave, so the thread name goes into every line
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(message)s"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

LevelT = Union[int, str]

logger: logging.Logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def _handlers(log_file: str | Path | None, fmt: str) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                mode="a",
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """
    Attach stdout (and file) output to the SiteMirror logger.

    With *replace_handlers* the previous handlers are closed and removed;
    otherwise the new ones are added next to them.
    """
    logger.setLevel(level)
    if replace_handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    for handler in _handlers(log_file, log_format):
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def init_logging(
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: fresh handlers at *level*."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def start_banner(lg: logging.Logger | None = None) -> str:
    """Log the START line of a run and return its random run id."""
    run_id = secrets.token_hex(10)
    (lg or logger).info("---------- START %s-applog ----------", run_id)
    return run_id


__all__ = ["logger", "configure", "init_logging", "start_banner", "DEFAULT_FORMAT", "LOGGER_NAME"]
