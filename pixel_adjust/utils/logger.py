import logging
import sys
from pixel_adjust.config import settings

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

# Level comes from settings, INFO if the name is unknown
log_level_str = getattr(settings, 'LOGGING_LEVEL', 'INFO').upper()
log_level = LOG_LEVEL_MAP.get(log_level_str, logging.INFO)

log_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Shared stdout handler; the worker thread and the event loop thread log through it
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)


def get_logger(name):
    """
    Gets a logger instance configured with the package settings.

    Safe to call repeatedly for the same name; the handler is attached once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if not logger.handlers:
        logger.addHandler(console_handler)

    logger.propagate = False

    return logger


def set_log_level(level_name):
    """Change the level of every logger created through get_logger."""
    global log_level
    log_level = LOG_LEVEL_MAP.get(str(level_name).upper(), logging.INFO)
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and console_handler in logger.handlers:
            logger.setLevel(log_level)
    return log_level
