#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SDTS DEM to ASCII grid converter.

Reads a digital elevation model through GDAL, writes its elevation grid as
plain text and optionally drives an external solid-modeling toolchain to
turn the grid into a rendered preview image.
"""

__version__ = "0.1.0"
