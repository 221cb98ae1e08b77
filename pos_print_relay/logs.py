"""
Logging setup for the relay.

Every record lands in one append-only, line-oriented log file with a
timestamp, and is echoed to the console.
"""

import os
import sys
import logging

PACKAGE_LOGGER = 'pos_print_relay'

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'

NO_LOGS = 'No logs available'


def configure_logging(log_path: str, level: str = 'INFO') -> logging.Logger:
    """
    Attach file and console handlers to the package logger.

    Safe to call more than once: a handler for the same file is only
    added the first time.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = os.path.abspath(log_path)
    has_file = any(
        isinstance(h, logging.FileHandler) and h.baseFilename == log_path
        for h in logger.handlers
    )
    if not has_file:
        directory = os.path.dirname(log_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    has_console = any(type(h) is logging.StreamHandler for h in logger.handlers)
    if not has_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def read_log(log_path: str) -> str:
    """Return the log file content, or a placeholder if it cannot be read."""
    try:
        with open(log_path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()
    except OSError:
        return NO_LOGS
