"""
Shared application logger.
"""

import logging
import sys

from app.core.config import get_settings

LOGGER_NAME = "weatherchat"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Create the application logger once, writing to stderr."""
    log = logging.getLogger(name)
    if log.handlers:
        return log

    settings = get_settings()
    level = logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(level)
    log.propagate = False
    return log


logger = setup_logger()
