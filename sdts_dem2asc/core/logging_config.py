#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration for the DEM conversion tool.

Everything logs under the ``sdts_dem2asc`` logger. Records go to stderr in a
short ``LEVEL: message`` form, since stdout carries the grid and the info
report; an optional log file gets the timestamped format.
"""
import logging
import sys
from typing import Optional
from sdts_dem2asc.core.config import LOGGING_CONFIG

PACKAGE_LOGGER_NAME = "sdts_dem2asc"


def parse_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _has_handler(logger: logging.Logger, kind: type, path: Optional[str] = None) -> bool:
    for handler in logger.handlers:
        if type(handler) is not kind:
            continue
        if path is None or getattr(handler, "baseFilename", None) == path:
            return True
    return False


def setup_logging(log_level: Optional[str] = None,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once: the level is always updated, the stderr
    handler is attached once and a file handler once per file.

    Parameters
    ----------
    log_level : str, optional
        DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to
        ``LOGGING_CONFIG['level']``.
    log_file : str, optional
        Also log to this file. Without it, ``LOGGING_CONFIG['log_file']`` is
        used when ``log_to_file`` is set.

    Returns
    -------
    logging.Logger
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    level = log_level or LOGGING_CONFIG.get("level", "WARNING")
    logger.setLevel(parse_level(level))
    # Records stop here; an application embedding us keeps its own root setup
    logger.propagate = False

    if not _has_handler(logger, logging.StreamHandler):
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(
            LOGGING_CONFIG.get("console_format", "%(levelname)s: %(message)s")))
        logger.addHandler(console)

    if log_file is None and LOGGING_CONFIG.get("log_to_file"):
        log_file = LOGGING_CONFIG.get("log_file")
    if log_file:
        file_handler = logging.FileHandler(log_file, delay=True)
        if _has_handler(logger, logging.FileHandler, file_handler.baseFilename):
            file_handler.close()
        else:
            file_handler.setFormatter(logging.Formatter(LOGGING_CONFIG["log_format"]))
            logger.addHandler(file_handler)

    logger.debug(f"Logging at level {logging.getLevelName(logger.level)}")
    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """Return the package child logger for ``module_name`` (usually ``__name__``)."""
    if module_name == PACKAGE_LOGGER_NAME or module_name.startswith(PACKAGE_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{module_name}")
