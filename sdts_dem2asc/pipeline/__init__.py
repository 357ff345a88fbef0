#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Artifact pipeline.

Turns the ASCII grid into a displacement map, a solid-modeling database and
a rendered preview image by chaining external programs.
"""
