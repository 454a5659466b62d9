"""
logger.py - Logging utilities for the NeatoCache application.

Every module logs through a child of the "neatocache" logger. The
application configures that parent once and children propagate to it.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Rotating log file: 10 MB per file, 5 backups
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _formatter():
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def parse_level(level):
    """
    Resolve a level name such as "debug" or a numeric level.

    Returns:
        int: Logging level, INFO when the name is unknown
    """
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logger(name, log_file=None, level=logging.INFO):
    """
    Set up a logger with consistent formatting.

    Args:
        name (str): Logger name, typically "neatocache"
        log_file (str, optional): Path to log file, if None logs to console only
        level (int or str, optional): Logging level

    Returns:
        Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))

    # Repeated setup must not duplicate console output
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_formatter())
        logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        file_handler.setFormatter(_formatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name):
    """
    Get a logger instance by name.

    A console handler is only attached when neither the logger nor an
    ancestor has one, so module loggers under a configured parent do not
    print twice.

    Args:
        name (str): Logger name

    Returns:
        Logger: Logger instance
    """
    logger = logging.getLogger(name)

    if not logger.hasHandlers():
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_formatter())
        logger.addHandler(console_handler)

    return logger


def set_global_log_level(level):
    """
    Set the log level for all loggers.

    Args:
        level (int or str): Logging level (e.g., logging.INFO)
    """
    level = parse_level(level)
    for logger_name in list(logging.root.manager.loggerDict):
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger().setLevel(level)
