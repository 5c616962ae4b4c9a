"""Logging helpers shared by the library and the CLI.

Library code only ever calls `get_logger`, which never installs handlers; output
is left to the host application. The CLI calls `configure_logging`, whose level
defaults to `MODTASKS_LOG_LEVEL`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os


ROOT_LOGGER = "moduletasks"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_configured = False


def _level_from(name: str | None) -> int:
    name = (name or os.getenv("MODTASKS_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str | None = None, log_file: Path | None = None) -> None:
    """Install the console handler (and optionally a rotating file handler).

    Safe to call more than once: the level is updated, handlers are not duplicated.
    """
    global _configured
    if not _configured:
        logging.basicConfig(level=_level_from(level), format=LOG_FORMAT)
        _configured = True
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(_level_from(level))
    if log_file and not any(
        isinstance(h, RotatingFileHandler) for h in root.handlers
    ):
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
