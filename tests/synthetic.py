#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Synthetic rasters for the test suite.

Rasters are written as GeoTIFF with rasterio; GDAL reads them the same way
it reads an SDTS DEM.
"""
import os
from typing import Optional, Sequence, Tuple
import numpy as np
import rasterio
from rasterio.transform import Affine

# UTM zone 11N, WGS84: linear unit is the metre
DEFAULT_CRS = "EPSG:32611"


def save_synthetic_raster(
    output_path: str,
    elevation: Sequence[Sequence[float]],
    cell_size: Tuple[float, float] = (10.0, 10.0),
    crs: Optional[str] = DEFAULT_CRS,
    origin: Tuple[float, float] = (500000.0, 4000000.0),
    nodata: Optional[float] = None,
) -> str:
    """
    Save a single-band float32 raster.

    Parameters
    ----------
    output_path : str
        Path to save the raster.
    elevation : sequence
        Rows of elevation values, top row first.
    cell_size : tuple, optional
        (x, y) pixel size in CRS units, by default (10, 10). The y size is
        written negative (north-up).
    crs : str, optional
        CRS of the raster, by default UTM zone 11N. None writes no CRS.
    origin : tuple, optional
        Top-left corner.
    nodata : float, optional
        Nodata value recorded in the file, by default none.

    Returns
    -------
    str
        Path to the saved raster.
    """
    data = np.asarray(elevation, dtype=np.float32)
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    transform = Affine(cell_size[0], 0.0, origin[0],
                       0.0, -cell_size[1], origin[1])

    with rasterio.open(
        output_path,
        'w',
        driver='GTiff',
        height=data.shape[0],
        width=data.shape[1],
        count=1,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data, 1)

    return output_path
