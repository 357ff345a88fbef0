#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input handling for the DEM conversion tool.

This module opens the input dataset through GDAL, derives the integer cell
scale from its geotransform and checks that the grid is a square-celled,
meter-scaled elevation model before any data is read.
"""
import math
from typing import IO, NamedTuple, Optional, Tuple
from osgeo import gdal, osr

from sdts_dem2asc.core.config import (
    DEFAULT_BAND, DEFAULT_SCALE_Z, REQUIRED_UNIT_NAMES, REQUIRED_UNIT_MULTIPLIER
)
from sdts_dem2asc.core.exceptions import DatasetOpenError, OutputError, ValidationError
from sdts_dem2asc.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

gdal.UseExceptions()

# GDAL's default for datasets without georeferencing
IDENTITY_GEOTRANSFORM: Tuple[float, ...] = (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


class CellScale(NamedTuple):
    """Integer cell size in meters along each axis."""
    x: int
    y: int
    z: int


class LoadedDataset(NamedTuple):
    """An opened dataset together with what the loader derived from it."""
    dataset: gdal.Dataset
    geotransform: Tuple[float, ...]
    has_geotransform: bool
    scale: CellScale
    srs: Optional[osr.SpatialReference]


def open_dataset(path: str) -> gdal.Dataset:
    """
    Open a raster dataset read-only.

    Parameters
    ----------
    path : str
        Path to the dataset. For SDTS this is the CATD module file
        (e.g. ``1107CATD.DDF``).

    Returns
    -------
    gdal.Dataset
        Opened dataset.

    Raises
    ------
    DatasetOpenError
        If GDAL cannot open the path.
    """
    logger.info(f"Opening dataset {path}")
    try:
        dataset = gdal.Open(str(path), gdal.GA_ReadOnly)
    except RuntimeError as e:
        raise DatasetOpenError(str(path), str(e)) from e

    if dataset is None:
        raise DatasetOpenError(str(path))

    if dataset.RasterCount < 1:
        raise ValidationError(f"Input file '{path}' has no raster bands")

    logger.info(f"Opened {dataset.GetDriver().ShortName} dataset "
                f"{dataset.RasterXSize}x{dataset.RasterYSize}x{dataset.RasterCount}")
    return dataset


def get_geotransform(dataset: gdal.Dataset) -> Tuple[Tuple[float, ...], bool]:
    """
    Fetch the dataset geotransform.

    Returns
    -------
    tuple
        - six-coefficient geotransform (identity if the dataset has none)
        - whether the dataset actually carries a geotransform
    """
    geotransform = dataset.GetGeoTransform(can_return_null=True)
    if geotransform is None:
        logger.warning("Dataset has no geotransform, assuming unit pixels")
        return IDENTITY_GEOTRANSFORM, False
    return tuple(geotransform), True


def compute_cell_scale(geotransform: Tuple[float, ...]) -> CellScale:
    """
    Compute the integer cell scale from a geotransform.

    The y pixel size is negative for north-up rasters; it is negated since
    the grid is later consumed bottom row first.
    """
    scale_x = int(math.floor(geotransform[1]))
    scale_y = -int(math.floor(geotransform[5]))
    return CellScale(scale_x, scale_y, DEFAULT_SCALE_Z)


def validate_cell_scale(scale: CellScale) -> None:
    """Require square cells."""
    if scale.x != scale.y:
        raise ValidationError(
            f"cell scale x ({scale.x}) != cell scale y ({scale.y})"
        )


def get_spatial_reference(dataset: gdal.Dataset) -> Optional[osr.SpatialReference]:
    """Return the dataset's spatial reference, or None if it has none."""
    wkt = dataset.GetProjectionRef()
    if not wkt:
        return None
    srs = osr.SpatialReference()
    srs.ImportFromWkt(wkt)
    return srs


def validate_units(srs: osr.SpatialReference) -> None:
    """
    Require the coordinate system's linear unit to be the meter.

    Parameters
    ----------
    srs : osr.SpatialReference
        Spatial reference of the dataset.

    Raises
    ------
    ValidationError
        If the unit name is not a meter spelling, or its multiplier is not 1.
    """
    unit = srs.GetAttrValue("UNIT", 0) or ""
    accepted = {name.lower() for name in REQUIRED_UNIT_NAMES}
    if unit.lower() not in accepted:
        raise ValidationError(
            f"Cell unit is '{unit}' instead of '{REQUIRED_UNIT_NAMES[0]}'."
        )

    multiplier = srs.GetAttrValue("UNIT", 1)
    try:
        value = int(float(multiplier))
    except (TypeError, ValueError):
        value = 0
    if value != REQUIRED_UNIT_MULTIPLIER:
        raise ValidationError(
            f"Cell z scale is '{value}' instead of '{REQUIRED_UNIT_MULTIPLIER}'."
        )


def load_dataset(path: str, info: bool = False) -> LoadedDataset:
    """
    Open and validate an elevation dataset.

    Parameters
    ----------
    path : str
        Path to the input dataset.
    info : bool, optional
        Information-only mode. Non-square cells are tolerated so the
        dataset can still be inspected; the unit check always applies.

    Returns
    -------
    LoadedDataset
        Dataset handle, geotransform, cell scale and spatial reference.
    """
    dataset = open_dataset(path)
    geotransform, has_geotransform = get_geotransform(dataset)
    scale = compute_cell_scale(geotransform)
    logger.debug(f"Geotransform {geotransform} gives cell scale {scale}")

    if not info:
        validate_cell_scale(scale)

    srs = get_spatial_reference(dataset)
    if srs is not None:
        validate_units(srs)
    else:
        logger.warning("Dataset has no projection reference, unit check skipped")

    return LoadedDataset(dataset, geotransform, has_geotransform, scale, srs)


def get_band(dataset: gdal.Dataset, band_number: int = DEFAULT_BAND) -> gdal.Band:
    """Fetch a raster band (1-based)."""
    return dataset.GetRasterBand(band_number)


def get_band_min_max(band: gdal.Band) -> Tuple[float, float]:
    """
    Return the band's minimum and maximum.

    Uses the min/max recorded in the band metadata when both are present,
    otherwise computes them from the raster (approximate results allowed).
    """
    minimum = band.GetMinimum()
    maximum = band.GetMaximum()
    if minimum is None or maximum is None:
        logger.debug("Band has no stored min/max, computing from raster")
        try:
            computed = band.ComputeRasterMinMax(True)
        except RuntimeError as e:
            # e.g. every pixel is nodata
            raise ValidationError(f"Cannot compute band minimum/maximum: {e}") from e
        if computed is None:
            raise ValidationError("Cannot compute band minimum/maximum: no valid pixels")
        minimum, maximum = computed
    return float(minimum), float(maximum)


def open_output(path: str, mode: str = 'w') -> IO:
    """
    Open an output file for writing.

    Raises
    ------
    OutputError
        If the file cannot be created, e.g. its directory does not exist.
    """
    try:
        return open(path, mode)
    except OSError as e:
        raise OutputError(path, e.strerror or str(e)) from e
