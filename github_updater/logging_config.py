"""
Central logging configuration for the GitHub updater.

Modules obtain their logger through get_logger(); the CLI (or the embedding
application) calls configure_logging() once. Repeated calls replace the
updater's own handler instead of stacking duplicates, which keeps test runs
and long-lived hosts quiet.

``GITHUB_UPDATER_LOG_LEVEL``
    Default level name (DEBUG, INFO, ...) when none is passed explicitly.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

LOG_LEVEL_ENV = "GITHUB_UPDATER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "github_updater"

_HANDLER_TAG = "_github_updater_handler"


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the updater's root logger."""
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[Union[int, str]] = None,
                      log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Attach a single handler to the updater's root logger.

    Args:
        level: Level name or number; falls back to GITHUB_UPDATER_LOG_LEVEL
        log_file: Optional file to write to instead of stderr

    Returns:
        The configured root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_TAG, True)
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))
    return root
