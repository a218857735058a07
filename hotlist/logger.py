"""Logging utilities."""

import logging

from .config import LoggingConfig

# Triggers may run on the "hotlist" worker thread
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


def setup_logging(config: LoggingConfig) -> int:
    """Setup application logging.

    Logs go to stderr and, unless ``config.file`` is empty, to that file.
    An unknown level name falls back to INFO with a warning.

    Args:
        config: Logging configuration

    Returns:
        The level applied
    """
    level = logging.getLevelName(config.level.upper())
    unknown = not isinstance(level, int)
    if unknown:
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(logging.FileHandler(config.file, delay=True))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    if unknown:
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", config.level)
    return level
