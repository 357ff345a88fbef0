#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Elevation grid modules.

This package contains the scanline extractor that writes the ASCII grid and
the information-mode report, including the projection tree dump.
"""
