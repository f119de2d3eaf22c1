"""Package logging setup."""

import logging
import sys
from typing import Optional

LOGGER_NAME = "gzip_helpers"
HANDLER_NAME = "gzip_helpers.console"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _find_console_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Send package log records to stdout.

    Calling it again only changes the level; handlers added by the
    application are left alone.

    Args:
        level: Logging level, defaults to GZIP_LOG_LEVEL.

    Returns:
        The ``gzip_helpers`` logger.
    """
    if level is None:
        from ..config import Config

        level = Config.get_instance().log_level

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    handler = _find_console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    handler.setLevel(level)
    return logger
