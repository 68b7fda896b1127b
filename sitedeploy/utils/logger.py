"""
Centralized logging configuration with colored output
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import colorlog


ROOT_LOGGER_NAME = "sitedeploy"

CONSOLE_FORMAT = "%(log_color)s%(levelname)-8s%(reset)s %(blue)s[%(name)s]%(reset)s %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the package logger with colored console output and an optional
    daily log file. Calling it again replaces the previous handlers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the daily log file; None disables file logging
        console: Whether to output to console

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(colorlog.ColoredFormatter(
            CONSOLE_FORMAT,
            reset=True,
            log_colors=LOG_COLORS,
            style='%'
        ))
        logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y-%m-%d")

        file_handler = logging.FileHandler(log_path / f"{ROOT_LOGGER_NAME}_{today}.log", encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package namespace.

    Module loggers (``get_logger(__name__)``) are children of the package
    logger, so they pick up whatever configure_logging() installed.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
