"""
logger.py
---------
Application-wide logging configuration.

Design Decisions:
    * A single root logger ("schema_engine") is configured once at import
      time; every module obtains a child via ``get_logger(__name__)``.
    * Console output goes to stderr. An optional file handler (LOG_FILE)
      records everything at DEBUG with file/line information.
    * Every handler carries a :class:`RedactPasswordFilter`, so a connection
      string that slips into a message or a driver error never reaches a log
      with its password.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from config import CONFIG, get_log_level
from models.target import safe_dsn

_ROOT_LOGGER_NAME = "schema_engine"
_CONSOLE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class RedactPasswordFilter(logging.Filter):
    """Mask passwords embedded in connection strings within log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = safe_dsn(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(
    level: int | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """
    (Re)configure the root 'schema_engine' logger.

    Args:
        level:    Console level; defaults to LOG_LEVEL from config.
        log_file: Optional path for a DEBUG-level file log; defaults to
                  LOG_FILE from config.

    Returns:
        The configured root logger.
    """
    level = get_log_level() if level is None else level
    log_file = CONFIG.logging.log_file if log_file is None else log_file

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG if log_file else level)

    redact = RedactPasswordFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt=_CONSOLE_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.addFilter(redact)
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as exc:
            root.warning("Could not create log file '%s': %s", log_path, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(fmt=_FILE_FORMAT, datefmt=_DATE_FORMAT))
            file_handler.addFilter(redact)
            root.addHandler(file_handler)

    return root


configure_logging()


def get_logger(name: str) -> logging.Logger:
    """
    Return a child logger scoped to the given name.

    Example::

        log = get_logger(__name__)
        log.info("Applying migration (%d statements)", count)
    """
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
