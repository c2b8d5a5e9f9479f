"""Logging configuration for the site baker.

Every module logs through a named child of the "baker" logger. The level
comes from the LOG_LEVEL environment variable unless given explicitly.
"""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "baker"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str | None = None) -> int:
    """Numeric level from an int, a level name, or LOG_LEVEL (default INFO)."""
    if isinstance(level, int):
        return level
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {name}")
    return resolved


def setup_logging(
    level: int | str | None = None,
    module_name: str = ROOT_LOGGER,
) -> logging.Logger:
    """Return a logger for `module_name`, configuring the shared handler once.

    The stdout handler is attached to the "baker" logger only; module
    loggers ("baker.wpdb", "baker.shell", ...) propagate to it, so a
    record is never printed twice.

    Args:
        level: Level for the baker logger (int or name). Defaults to LOG_LEVEL.
        module_name: Name for the logger instance.

    Returns:
        Configured logger.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        root.setLevel(resolve_level(level))
        root.propagate = False
    elif level is not None:
        root.setLevel(resolve_level(level))

    if module_name == ROOT_LOGGER or module_name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(module_name)
    return root.getChild(module_name)
