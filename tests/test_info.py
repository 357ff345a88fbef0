#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for the projection tree and the information report.
"""
import io
import os
import tempfile
import unittest

from sdts_dem2asc.core.io import load_dataset
from sdts_dem2asc.grid.info import describe_band, describe_projection, write_info_report
from sdts_dem2asc.grid.srs_tree import find_node, format_node, parse_wkt
from synthetic import save_synthetic_raster

UTM_WKT = (
    'PROJCS["WGS 84 / UTM zone 11N",'
    'GEOGCS["WGS 84",'
    'DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563,AUTHORITY["EPSG","7030"]],'
    'AUTHORITY["EPSG","6326"]],'
    'PRIMEM["Greenwich",0],'
    'UNIT["degree",0.0174532925199433]],'
    'PROJECTION["Transverse_Mercator"],'
    'PARAMETER["central_meridian",-117],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]]]'
)


class TestSrsTree(unittest.TestCase):
    """Test WKT tree parsing and traversal."""

    def setUp(self):
        self.root = parse_wkt(UTM_WKT)

    def test_root(self):
        self.assertEqual(self.root.name, "PROJCS")
        self.assertEqual(self.root.children[0].name, "WGS 84 / UTM zone 11N")
        self.assertEqual([c.name for c in self.root.children[1:]],
                         ["GEOGCS", "PROJECTION", "PARAMETER", "UNIT"])

    def test_find_prefers_direct_child(self):
        unit = find_node(self.root, "UNIT")
        self.assertEqual(unit.children[0].name, "metre")

    def test_find_nested(self):
        spheroid = find_node(self.root, "SPHEROID")
        self.assertEqual(spheroid.children[1].name, "6378137")
        self.assertIsNone(find_node(self.root, "VERT_CS"))

    def test_format_node(self):
        lines = format_node(find_node(self.root, "SPHEROID"))
        self.assertEqual(lines, [
            "  SPHEROID [4 children]:",
            "    0: 'WGS 84'",
            "    1: '6378137'",
            "    2: '298.257223563'",
            "    AUTHORITY [2 children]:",
            "    0: 'EPSG'",
            "    1: '7030'",
        ])

    def test_doubled_quotes(self):
        node = parse_wkt('LOCAL_CS["say ""hi"""]')
        self.assertEqual(node.children[0].name, 'say "hi"')

    def test_malformed(self):
        with self.assertRaises(ValueError):
            parse_wkt('PROJCS["x",')
        with self.assertRaises(ValueError):
            parse_wkt('PROJCS["x"]]')


class TestInfoReport(unittest.TestCase):
    """Test the --info report."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()

    def test_report_sections(self):
        path = save_synthetic_raster(os.path.join(self.dir, "dem.tif"),
                                     [[10, 20], [5, 8]])
        out = io.StringIO()
        write_info_report(load_dataset(path, info=True), out)
        text = out.getvalue()

        self.assertIn("Origin = (500000.000000,4000000.000000)", text)
        self.assertIn("Pixel Size = (10.000000,-10.000000)", text)
        self.assertIn("Data set files:", text)
        self.assertIn("Driver: GTiff/GeoTIFF", text)
        self.assertIn("Size is 2x2x1", text)
        self.assertIn("Projection is:", text)
        self.assertIn("  PROJCS [", text)
        self.assertIn("There is 1 raster band in this data set.", text)
        self.assertIn("Min=5.000, Max=20.000", text)
        self.assertTrue(text.endswith("\nEarly exit for '--info' option.\n"))

        # projection comes before the band section
        self.assertLess(text.index("Projection is:"), text.index("There is 1 raster band"))

    def test_missing_nodes_reported(self):
        from osgeo import osr
        srs = osr.SpatialReference()
        srs.ImportFromEPSG(4326)
        lines = describe_projection(srs)
        self.assertIn("  PROJCS (NULL)", lines)
        self.assertIn("  PROJECTION (NULL)", lines)
        self.assertTrue(any(line.startswith("  GEOGCS [") for line in lines))

    def test_block_size_warning(self):
        import numpy as np
        from osgeo import gdal
        # in-memory rasters are stored one scanline per block
        dataset = gdal.GetDriverByName("MEM").Create("", 4, 3, 1, gdal.GDT_Float32)
        dataset.GetRasterBand(1).WriteArray(np.arange(12, dtype=np.float32).reshape(3, 4))
        lines = describe_band(dataset)

        self.assertTrue(lines[2].startswith("Block=4x1 Type=Float32, "))
        self.assertIn("WARNING: ny = 3 but nBlockYSize = 1", lines)
        self.assertFalse(any(line.startswith("WARNING: nx") for line in lines))
        self.assertIn("Min=0.000, Max=11.000", lines)

    def test_no_projection(self):
        self.assertEqual(describe_projection(None), [])


if __name__ == '__main__':
    unittest.main()
