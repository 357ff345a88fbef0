#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Information-mode report.

Prints what GDAL knows about the input: georeferencing, files, metadata,
driver, size, the projection tree and the properties of band 1.
"""
from typing import List, Optional, TextIO
from osgeo import gdal, osr

from sdts_dem2asc.core.config import DEFAULT_BAND, PROJECTION_NODES
from sdts_dem2asc.core.io import LoadedDataset, get_band, get_band_min_max
from sdts_dem2asc.core.logging_config import get_module_logger
from sdts_dem2asc.grid.srs_tree import find_node, format_node, srs_to_tree
from sdts_dem2asc.utils.utils import plural

# Initialize logger
logger = get_module_logger(__name__)


def _listing(title: str, items: Optional[List[str]]) -> List[str]:
    if not items:
        return []
    return [f"{title}:"] + [f"  {item}" for item in items]


def describe_dataset(loaded: LoadedDataset) -> List[str]:
    """
    Describe the dataset as a whole.

    Covers origin and pixel size, the files making up the dataset, dataset
    and driver metadata, driver name and raster size.
    """
    dataset = loaded.dataset
    lines = []

    if loaded.has_geotransform:
        gt = loaded.geotransform
        lines.append(f"Origin = ({gt[0]:.6f},{gt[3]:.6f})")
        lines.append(f"Pixel Size = ({gt[1]:.6f},{gt[5]:.6f})")

    lines.extend(_listing("Data set files", dataset.GetFileList()))
    lines.extend(_listing("Dataset Metadata", dataset.GetMetadata_List()))

    driver = dataset.GetDriver()
    lines.extend(_listing("Driver Metadata", driver.GetMetadata_List()))
    lines.append(f"Driver: {driver.ShortName}/{driver.LongName}")
    lines.append(f"Size is {dataset.RasterXSize}x{dataset.RasterYSize}x{dataset.RasterCount}")
    return lines


def describe_projection(srs: Optional[osr.SpatialReference]) -> List[str]:
    """Dump the main projection nodes and their subtrees."""
    if srs is None:
        return []

    lines = ["Projection is:"]
    try:
        root = srs_to_tree(srs)
    except ValueError as e:
        logger.warning(f"Cannot walk projection tree: {e}")
        return lines + [f"  {srs.ExportToWkt()}"]

    for name in PROJECTION_NODES:
        node = find_node(root, name)
        if node is None:
            lines.append(f"  {name} (NULL)")
            continue
        lines.extend(format_node(node))
    return lines


def describe_band(dataset: gdal.Dataset, band_number: int = DEFAULT_BAND) -> List[str]:
    """Describe a band: block size, data type, block warnings and min/max."""
    band_count = dataset.RasterCount
    s, isare = plural(band_count)
    lines = [
        f"There {isare} {band_count} raster band{s} in this data set.",
        f"Fetching data for band {band_number}:",
    ]

    band = get_band(dataset, band_number)
    block_x, block_y = band.GetBlockSize()
    lines.append(
        f"Block={block_x}x{block_y} Type={gdal.GetDataTypeName(band.DataType)}, "
        f"ColorInterp={gdal.GetColorInterpretationName(band.GetColorInterpretation())}"
    )

    # The grid is read whole-scanline; a tiled layout is only worth a warning
    if band.XSize != block_x:
        lines.append(f"WARNING: nx = {band.XSize} but nBlockXSize = {block_x}")
    if band.YSize != block_y:
        lines.append(f"WARNING: ny = {band.YSize} but nBlockYSize = {block_y}")

    minimum, maximum = get_band_min_max(band)
    lines.append(f"Min={minimum:.3f}, Max={maximum:.3f}")

    overviews = band.GetOverviewCount()
    if overviews > 0:
        lines.append(f"Band has {overviews} overviews.")

    color_table = band.GetColorTable()
    if color_table is not None:
        lines.append(f"Band has a color table with {color_table.GetCount()} entries.")

    return lines


def write_info_report(loaded: LoadedDataset, out: TextIO) -> None:
    """
    Write the complete information report.

    Parameters
    ----------
    loaded : LoadedDataset
        Dataset opened in information mode.
    out : TextIO
        Destination stream, normally stdout.
    """
    lines = describe_dataset(loaded)
    lines.extend(describe_projection(loaded.srs))
    lines.extend(describe_band(loaded.dataset))
    lines.append("")
    lines.append("Early exit for '--info' option.")
    out.write("\n".join(lines) + "\n")
