#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the DEM conversion tool.

This module centralizes the configuration parameters used across the loader,
the grid extractor and the artifact pipeline. Values can be overridden from a
YAML file with ``load_config_file``.
"""
from typing import Dict, List, Any
from pathlib import Path
import yaml

from sdts_dem2asc.core.exceptions import UsageError

# General configuration
DEFAULT_BAND: int = 1
DEFAULT_CHOP_OFFSET: int = 1
DEFAULT_SCALE_Z: int = 1

# Linear units accepted for the cell size (compared case-insensitively).
# Older GDAL releases spell it "Meter", current ones "metre".
REQUIRED_UNIT_NAMES: List[str] = ["Meter", "metre"]
REQUIRED_UNIT_MULTIPLIER: int = 1

# Top-level projection nodes shown by --info, in display order
PROJECTION_NODES: List[str] = ["PROJCS", "GEOGCS", "DATUM", "SPHEROID", "PROJECTION"]

# Render configuration
RENDER_CONFIG: Dict[str, Any] = {
    "azimuth": 35,
    "elevation": 25,
    "pixel_size": 512 * 3,  # square image, pixels per side
}

# External programs used by the artifact pipeline
TOOLS_CONFIG: Dict[str, str] = {
    "reverse": "tac",
    "asc2dsp": "asc2dsp",
    "mged": "mged",
    "rt": "rt",
    "pix2png": "pix-png",
}

# Artifact pipeline behaviour
PIPELINE_CONFIG: Dict[str, Any] = {
    "strict": False,  # True aborts at the first failed step
}

# Metadata export configuration
EXPORT_CONFIG: Dict[str, Any] = {
    "metadata_format": "json",  # Options: 'json', 'yaml'
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "WARNING",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": None,
    "console_format": "%(levelname)s: %(message)s",  # stderr, next to grid output
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",  # log file
}

# Sections a YAML config file may override
CONFIG_SECTIONS: Dict[str, Dict[str, Any]] = {
    "render": RENDER_CONFIG,
    "tools": TOOLS_CONFIG,
    "pipeline": PIPELINE_CONFIG,
    "export": EXPORT_CONFIG,
    "logging": LOGGING_CONFIG,
}


def load_config_file(path: str) -> Dict[str, Dict[str, Any]]:
    """
    Load a YAML configuration file and apply it to the module-level dicts.

    Parameters
    ----------
    path : str
        Path to a YAML file whose top-level keys are section names
        (``render``, ``tools``, ``pipeline``, ``export``, ``logging``).

    Returns
    -------
    dict
        The parsed overrides, keyed by section.

    Raises
    ------
    UsageError
        If the file cannot be read or parsed, or names an unknown section
        or key.
    """
    config_path = Path(path)
    try:
        with open(config_path, 'r') as f:
            overrides = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise UsageError(f"Cannot read config file '{path}': {e}") from e

    if not isinstance(overrides, dict):
        raise UsageError(f"Config file '{path}' must contain a mapping")

    for section, values in overrides.items():
        if section not in CONFIG_SECTIONS:
            raise UsageError(f"Unknown config section '{section}' in '{path}'")
        if not isinstance(values, dict):
            raise UsageError(f"Config section '{section}' must be a mapping")
        target = CONFIG_SECTIONS[section]
        unknown = set(values) - set(target)
        if unknown:
            raise UsageError(
                f"Unknown key(s) {sorted(unknown)} in config section '{section}'"
            )
        target.update(values)

    return overrides
