#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for DEM conversion.

This module contains the core components for dataset loading,
configuration management, error types and logging setup.
"""
