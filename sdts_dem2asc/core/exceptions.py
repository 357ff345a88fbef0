#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error hierarchy for the DEM conversion tool.

Every error is fatal for the run: the command line entry point catches
``Dem2AscError``, reports it and exits with status 1.
"""
from typing import Optional


class Dem2AscError(Exception):
    """Base error for DEM conversion."""


class UsageError(Dem2AscError):
    """Missing input, unknown argument, bad flag value or bad config file."""


class DatasetOpenError(Dem2AscError):
    """GDAL could not open the input file."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Input file '{path}' not found"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ValidationError(Dem2AscError):
    """Dataset is not a square-celled, meter-scaled elevation grid."""


class ToolError(Dem2AscError):
    """An artifact pipeline step failed (strict mode only).

    Attributes:
        step: Name of the failed step
        returncode: Exit status of the external program, or None if it
            could not be started
    """

    def __init__(self, step: str, returncode: Optional[int], detail: str = "") -> None:
        self.step = step
        self.returncode = returncode
        message = f"Pipeline step '{step}' failed"
        if returncode is not None:
            message += f" with exit status {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class DatasetReadError(Dem2AscError):
    """GDAL failed while reading band data from an opened dataset."""


class OutputError(Dem2AscError):
    """An output file (grid, run summary or metadata) could not be written."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Cannot write '{path}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
