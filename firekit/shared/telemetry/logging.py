"""Logging for firekit.

Every module logs to a child of the ``firekit`` logger. The package only
installs a NullHandler on import, so nothing is printed unless the host
application configures logging itself or calls setup_logging().
"""

import logging
import sys

from firekit.core.config import get_settings

LIBRARY_LOGGER_NAME = "firekit"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def install_null_handler() -> None:
    """Attach a NullHandler to the firekit logger (once)."""
    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())


def setup_logging(level: int | None = None) -> logging.Logger:
    """Send firekit's log records to stdout.

    Opt-in for scripts and services that do not configure logging
    themselves. Only the firekit logger is touched; the root logger is left
    alone. Calling it again updates the level without adding handlers.

    Args:
        level: Log level; defaults to DEBUG when settings.debug is True,
            otherwise INFO.

    Returns:
        The configured firekit logger.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    logger.setLevel(level)
    if not any(getattr(h, "_firekit_stdout", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._firekit_stdout = True
        logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
