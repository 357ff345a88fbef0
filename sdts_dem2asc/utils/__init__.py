#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for DEM conversion.

This package contains run metadata handling and general-purpose helpers.
"""
