#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Solid-modeling script generation.

The script builds a displacement-map solid from the ``.dsp`` file and wraps
it in a region that the renderer can trace.
"""
from pathlib import Path
from typing import Union

from sdts_dem2asc.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def build_mged_script(solid: str, region: str, dsp_file: str,
                      width: int, height: int, cell_size: int) -> str:
    """
    Return the mged commands for a terrain model.

    Parameters
    ----------
    solid : str
        Name of the dsp solid (``X.s``).
    region : str
        Name of the region containing the solid (``X.r``).
    dsp_file : str
        Displacement map file.
    width, height : int
        Grid dimensions in cells.
    cell_size : int
        Horizontal cell size in meters; the vertical scale is 1.
    """
    return (
        "units m\n"
        f"in {solid} dsp f {dsp_file} {width} {height} 0 ad {cell_size} 1\n"
        f"r {region} u {solid}\n"
    )


def write_mged_script(path: Union[str, Path], script: str) -> Path:
    """Write an mged script to ``path``."""
    path = Path(path)
    with open(path, 'w') as f:
        f.write(script)
    logger.info(f"Wrote mged script {path}")
    return path
