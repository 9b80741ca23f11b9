"""Logging configuration for the OAuth2 grant engine.

All modules log through children of a single package logger so that
applications embedding the engine can tune or silence it in one place.
Until setup_logging is called the package logger only carries a
NullHandler; records then propagate to whatever the host application
configured on the root logger.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from oauth2_grants.config import Settings

LOGGER_NAME = "oauth2_grants"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_handler: logging.StreamHandler[TextIO] | None = None

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def setup_logging(settings: Settings, stream: TextIO | None = None) -> None:
    """Attach a stream handler to the package logger.

    Used by the CLI. Calling this again updates the level and re-binds the
    existing handler to the current stream instead of adding a second one,
    so repeated in-process invocations never write to a stream that has
    since been closed.

    Args:
        settings: Settings carrying the log_level to apply
        stream: Destination stream; defaults to the current sys.stderr
    """
    global _handler

    log_level = getattr(logging, settings.log_level.value)
    target = stream if stream is not None else sys.stderr

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    if _handler is not None:
        _handler.setLevel(log_level)
        if _handler.stream is target:
            return
        # The previous stream may already be closed; setStream would flush it
        logger.removeHandler(_handler)
    else:
        logger.handlers.clear()

    _handler = logging.StreamHandler(target)
    _handler.setLevel(log_level)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False

    logger.debug("Logging configured with level %s", settings.log_level.value)


def get_logger(name: str) -> logging.Logger:
    """Return a logger parented under the package logger.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance
    """
    if name.startswith(LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Return the package logger to its unconfigured state (used by tests)."""
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _handler = None
