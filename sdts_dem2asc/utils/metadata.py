#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Metadata utilities for the DEM conversion tool.

This module writes the one-line run summary (grid size and cell scale) and,
on request, a fuller JSON or YAML description of the dataset and the
artifacts a run produced.
"""
import json
import sys
import yaml
from datetime import datetime
from typing import Any, Dict, List, Optional, TextIO

from sdts_dem2asc.core.io import CellScale, LoadedDataset, open_output
from sdts_dem2asc.core.logging_config import get_module_logger
from sdts_dem2asc.grid.extractor import GridSummary
from sdts_dem2asc.pipeline.steps import StepResult

# Initialize logger
logger = get_module_logger(__name__)


def format_run_summary(width: int, height: int, scale: CellScale) -> str:
    """Return the ``pixels: ...; scale: ...`` summary line."""
    return (f"pixels: {width} wide X {height} high; "
            f"scale: {scale.x} m X {scale.y} m X {scale.z} m\n")


def write_run_summary(width: int, height: int, scale: CellScale,
                      path: Optional[str] = None,
                      stream: Optional[TextIO] = None) -> None:
    """
    Write the run summary line.

    Parameters
    ----------
    width, height : int
        Grid dimensions.
    scale : CellScale
        Cell scale in meters.
    path : str, optional
        File to write (``X.info``). If None, ``stream`` is used.
    stream : TextIO, optional
        Stream used when no path is given, by default stderr.
    """
    line = format_run_summary(width, height, scale)
    if path is not None:
        with open_output(path) as f:
            f.write(line)
        logger.info(f"Saved run summary to {path}")
    else:
        (stream or sys.stderr).write(line)


def build_metadata(
    input_path: str,
    loaded: LoadedDataset,
    summary: GridSummary,
) -> Dict[str, Any]:
    """
    Collect metadata about the dataset and the grid extraction.

    Must be called while the dataset is still open. Pipeline outcomes are
    added afterwards with ``add_step_results``.

    Parameters
    ----------
    input_path : str
        Input dataset path as given on the command line.
    loaded : LoadedDataset
        Loaded dataset.
    summary : GridSummary
        Result of the grid extraction.

    Returns
    -------
    dict
        JSON/YAML-serializable metadata.
    """
    dataset = loaded.dataset
    return {
        'timestamp': datetime.now().isoformat(),
        'input': str(input_path),
        'raster_info': {
            'width': dataset.RasterXSize,
            'height': dataset.RasterYSize,
            'band_count': dataset.RasterCount,
            'driver': dataset.GetDriver().ShortName,
            'geotransform': [float(v) for v in loaded.geotransform],
            'projection': dataset.GetProjectionRef() or None,
            'cell_scale': loaded.scale._asdict(),
        },
        'grid': {
            'minimum': summary.minimum,
            'maximum': summary.maximum,
            'chop_base': summary.chop_base,
            'clamped_pixels': summary.clamped,
        },
        'artifacts': [],
    }


def add_step_results(metadata: Dict[str, Any], results: List[StepResult]) -> Dict[str, Any]:
    """Record artifact pipeline outcomes in ``metadata``."""
    metadata['artifacts'] = [
        {
            'step': r.name,
            'output': r.output,
            'returncode': r.returncode,
            'produced': r.produced,
        }
        for r in results
    ]
    return metadata


def save_metadata(metadata: Dict[str, Any], output_path: str, format: str = 'json') -> str:
    """
    Save metadata to a file.

    Parameters
    ----------
    metadata : dict
        Metadata from ``build_metadata``.
    output_path : str
        Destination file.
    format : str, optional
        Options: 'json', 'yaml'. By default 'json'.

    Returns
    -------
    str
        The path written.
    """
    if format.lower() == 'json':
        with open_output(output_path) as f:
            json.dump(metadata, f, indent=2)
    elif format.lower() == 'yaml':
        with open_output(output_path) as f:
            yaml.dump(metadata, f, default_flow_style=False)
    else:
        raise ValueError(f"Unsupported metadata format: {format}")

    logger.info(f"Saved metadata to {output_path}")
    return output_path
