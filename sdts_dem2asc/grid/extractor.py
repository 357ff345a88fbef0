#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Elevation grid extraction.

This module reads band 1 scanline by scanline, truncates each sample to an
integer elevation, optionally rebases ("chops") it relative to the band
minimum and writes the result as a space-separated ASCII grid.
"""
import math
import sys
from typing import NamedTuple, Optional, TextIO
import numpy as np
from osgeo import gdal
from tqdm import tqdm

from sdts_dem2asc.core.config import DEFAULT_CHOP_OFFSET
from sdts_dem2asc.core.exceptions import DatasetReadError, UsageError
from sdts_dem2asc.core.io import get_band_min_max
from sdts_dem2asc.core.logging_config import get_module_logger
from sdts_dem2asc.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)


class GridSummary(NamedTuple):
    """What one extraction pass read and wrote."""
    width: int
    height: int
    minimum: float
    maximum: float
    chop_base: Optional[int]
    clamped: int


def compute_chop_base(minimum: float, chop_offset: int = DEFAULT_CHOP_OFFSET) -> int:
    """
    Return the value subtracted from every sample in chop mode.

    Parameters
    ----------
    minimum : float
        Band minimum.
    chop_offset : int, optional
        How far below the minimum the new base level sits, by default 1.

    Raises
    ------
    UsageError
        If ``chop_offset`` is below 1.
    """
    if chop_offset < 1:
        raise UsageError(f"Chop elevation '{chop_offset}' is less than 1.")
    return int(math.floor(minimum)) + chop_offset


def adjust_scanline(samples: np.ndarray, chop_base: Optional[int] = None) -> np.ndarray:
    """
    Convert float samples to integer elevations.

    Samples are truncated toward zero, then ``chop_base`` is subtracted when
    given. No clamping happens here, so negative values survive for the
    caller to clamp or skip.
    """
    pixels = samples.astype(np.int64)
    if chop_base is not None:
        pixels = pixels - chop_base
    return pixels


def format_row(pixels: np.ndarray) -> str:
    """Format one grid row, clamping negatives to zero."""
    clamped = np.maximum(pixels, 0)
    return "".join(f" {p}" for p in clamped.tolist()) + "\n"


def read_scanline(band: gdal.Band, row: int) -> np.ndarray:
    """Read one full-width scanline as float32."""
    try:
        data = band.ReadAsArray(0, row, band.XSize, 1, buf_type=gdal.GDT_Float32)
    except RuntimeError as e:
        raise DatasetReadError(f"Cannot read scanline {row}: {e}") from e
    if data is None:
        raise DatasetReadError(f"Cannot read scanline {row}")
    return data[0]


@timer
def extract_grid(
    band: gdal.Band,
    out: TextIO,
    chop: bool = False,
    chop_offset: int = DEFAULT_CHOP_OFFSET,
    debug: bool = False,
    debug_out: Optional[TextIO] = None,
    progress: bool = False,
) -> GridSummary:
    """
    Write the elevation grid of a band.

    Parameters
    ----------
    band : gdal.Band
        Band to read, normally band 1 of the dataset.
    out : TextIO
        Stream receiving the grid rows, top scanline first.
    chop : bool, optional
        Subtract ``floor(minimum) + chop_offset`` from every sample.
    chop_offset : int, optional
        Chop offset, must be >= 1. By default 1.
    debug : bool, optional
        Instead of grid values, print ``pixel[col,row] = value`` for every
        pixel that is not negative. Each row still ends with a newline on
        ``out``.
    debug_out : TextIO, optional
        Stream for debug lines, by default stdout.
    progress : bool, optional
        Show a progress bar on stderr.

    Returns
    -------
    GridSummary
        Grid dimensions, band min/max, chop base and the number of pixels
        that were clamped to zero (or skipped in debug mode).
    """
    width, height = band.XSize, band.YSize
    minimum, maximum = get_band_min_max(band)
    base = compute_chop_base(minimum, chop_offset) if chop else None
    debug_out = debug_out or sys.stdout

    logger.info(f"Extracting {width}x{height} grid, min={minimum:.3f}, max={maximum:.3f}")
    if base is not None:
        logger.info(f"Chopping elevations at base {base}")

    clamped = 0
    for row in tqdm(range(height), desc="Reading scanlines", unit="row",
                    disable=not progress):
        pixels = adjust_scanline(read_scanline(band, row), base)
        negative = pixels < 0
        clamped += int(np.count_nonzero(negative))

        if debug:
            for col in np.flatnonzero(~negative).tolist():
                debug_out.write(f"pixel[{col},{row}] = {pixels[col]}\n")
            out.write("\n")
        else:
            out.write(format_row(pixels))

    if clamped:
        logger.info(f"{clamped} negative pixels clamped to zero")

    return GridSummary(width, height, minimum, maximum, base, clamped)
