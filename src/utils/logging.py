"""Logging setup for servicematch.

Every module logs through ``logging.getLogger(__name__)``, so all records
flow into the ``src`` logger, which owns the single stderr handler. The
``src.matching`` subtree can run at its own level: the engine reports each
state transition at DEBUG, which is usually too chatty for the rest of the
package.
"""

import logging
import sys

PACKAGE_LOGGER = "src"
MATCHING_LOGGER = "src.matching"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: logging.Handler | None = None


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: str | None = None,
    matching_level: str | None = None,
) -> logging.Logger:
    """Install the stderr handler and set package levels.

    Args:
        level: Level for the whole package. Defaults to INFO.
        matching_level: Separate level for ``src.matching``. When omitted the
            subtree follows ``level``.

    Returns:
        The package logger.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_level_number(level or "INFO"))

    # The handler has no level of its own, so a lower subtree level still
    # reaches stderr even when the package level is higher.
    matching = logging.getLogger(MATCHING_LOGGER)
    matching.setLevel(
        logging.NOTSET if matching_level is None else _level_number(matching_level)
    )

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    return logger


def reset_logging() -> None:
    """Remove the handler and restore default levels."""
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging.getLogger(MATCHING_LOGGER).setLevel(logging.NOTSET)
