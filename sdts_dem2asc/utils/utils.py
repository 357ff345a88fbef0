#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the DEM conversion tool.
"""
import time
import functools
from typing import Callable, Tuple

from sdts_dem2asc.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.2f} seconds to run")
        return result
    return wrapper


def plural(count: int) -> Tuple[str, str]:
    """Return the ('s', 'are') or ('', 'is') pair matching ``count``."""
    return ("s", "are") if count > 1 else ("", "is")
