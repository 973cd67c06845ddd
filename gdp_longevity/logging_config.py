"""
Centralized logging configuration for the GDP and longevity pipeline.

All module loggers are children of the `gdp_longevity` package logger, which
owns the single color-coded console handler. Module loggers carry no level
of their own, so one call to `set_log_level` governs every module, including
ones imported later (the plotting module is only loaded on demand).
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

PACKAGE_LOGGER = "gdp_longevity"

CONSOLE_FORMAT = "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)s%(reset)s | %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s | %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS))
        package_logger.addHandler(console_handler)
        package_logger.setLevel(logging.INFO)
        package_logger.propagate = False
    return package_logger


def create_logger(name: Optional[str] = None,
                  log_level: Optional[Union[int, str]] = None,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Return a logger under the package logger.

    Names outside the package (e.g. '__main__') are nested under it so that
    their records reach the shared console handler.

    :param name: Name of the logger (typically __name__)
    :param log_level: Level for this logger only; by default it follows the package level
    :param log_file: Also append this logger's records to a plain-text file
    :return: Logger instance
    """
    package_logger = _package_logger()
    if not name or name == PACKAGE_LOGGER:
        logger = package_logger
    elif name.startswith(PACKAGE_LOGGER + "."):
        logger = logging.getLogger(name)
    else:
        logger = package_logger.getChild(name)

    if log_level is not None:
        logger.setLevel(log_level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        already_attached = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_path.absolute()
            for h in logger.handlers
        )
        if not already_attached:
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger


def log_exception(logger, e, context=None):
    """
    Standardized exception logging with optional context.

    :param logger: Logger instance
    :param e: Exception object
    :param context: Optional additional context for the error
    """
    logger.error(f"Error Type: {type(e).__name__}")
    logger.error(f"Error Details: {str(e)}")
    if context:
        logger.error(f"Context: {context}")


def set_log_level(log_level: Union[int, str]) -> None:
    """Set the package level; every module logger without its own level follows it."""
    _package_logger().setLevel(log_level)
