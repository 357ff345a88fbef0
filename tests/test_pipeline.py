#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for the artifact pipeline.

External programs are never run: subprocess.run is replaced by a recorder.
"""
import os
import subprocess
import tempfile
import unittest
from unittest import mock

from sdts_dem2asc.core.exceptions import ToolError
from sdts_dem2asc.pipeline.mged import build_mged_script
from sdts_dem2asc.pipeline.steps import (
    artifact_names, build_steps, run_pipeline, run_step
)


class RecordingRun:
    """Stand-in for subprocess.run that records commands."""

    def __init__(self, fail=(), missing=()):
        self.calls = []
        self.fail = set(fail)
        self.missing = set(missing)

    def __call__(self, cmd, stdin=None, stdout=None, stderr=None, check=False):
        self.calls.append({'cmd': list(cmd), 'stdin': stdin, 'stdout': stdout, 'stderr': stderr})
        if cmd[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        if hasattr(stdout, 'write'):
            stdout.write(b"output\n")
        return subprocess.CompletedProcess(cmd, 1 if cmd[0] in self.fail else 0)


class TestArtifactNames(unittest.TestCase):
    """Test output naming."""

    def test_names(self):
        names = artifact_names("out")
        self.assertEqual(names.asc, "out.asc")
        self.assertEqual(names.info, "out.info")
        self.assertEqual(names.reversed, "out-reversed.asc")
        self.assertEqual(names.dsp, "out.dsp")
        self.assertEqual(names.mged, "out.mged")
        self.assertEqual(names.database, "out.g")
        self.assertEqual(names.pix, "out-az35-el25.pix")
        self.assertEqual(names.png, "out-az35-el25.png")
        self.assertEqual((names.solid, names.region), ("out.s", "out.r"))


class TestMgedScript(unittest.TestCase):
    """Test the solid-modeling script."""

    def test_script(self):
        script = build_mged_script("out.s", "out.r", "out.dsp", 3, 2, 30)
        self.assertEqual(script,
                         "units m\n"
                         "in out.s dsp f out.dsp 3 2 0 ad 30 1\n"
                         "r out.r u out.s\n")


class TestPipeline(unittest.TestCase):
    """Test step construction and execution."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.base = os.path.join(self.tmp.name, "out")
        self.names = artifact_names(self.base)
        with open(self.names.asc, 'w') as f:
            f.write(" 1 2\n 3 4\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_step_order_and_commands(self):
        steps = build_steps(self.names, 2, 2, 10)
        self.assertEqual([s.name for s in steps],
                         ["reverse", "asc2dsp", "mged-script", "mged", "rt", "pix2png"])
        self.assertEqual([s.output for s in steps], [
            self.names.reversed, self.names.dsp, self.names.mged,
            self.names.database, self.names.pix, self.names.png,
        ])

        rt = steps[4].command
        self.assertEqual(rt[:4], ["rt", "-R", "-o", self.names.pix])
        self.assertIn("-s1536", rt)
        self.assertIn("-a35", rt)
        self.assertIn("-e25", rt)
        self.assertEqual(rt[-2:], [self.names.database, self.names.region])
        self.assertEqual(steps[5].command, ["pix-png", "-s1536", self.names.pix])

    def test_runs_five_external_programs(self):
        recorder = RecordingRun()
        with mock.patch("subprocess.run", recorder):
            results = run_pipeline(build_steps(self.names, 2, 2, 10))

        self.assertEqual([c['cmd'][0] for c in recorder.calls],
                         ["tac", "asc2dsp", "mged", "rt", "pix-png"])
        self.assertTrue(all(r.ok for r in results))

        # programs writing to stdout fill the output file
        with open(self.names.reversed) as f:
            self.assertEqual(f.read(), "output\n")
        with open(self.names.mged) as f:
            self.assertIn(f"dsp f {self.names.dsp} 2 2 0 ad 10 1", f.read())

        # mged reads the script on stdin, rt output is discarded
        self.assertEqual(recorder.calls[2]['cmd'], ["mged", "-c", self.names.database])
        self.assertEqual(recorder.calls[2]['stdin'].name, self.names.mged)
        self.assertIs(recorder.calls[3]['stdout'], subprocess.DEVNULL)
        self.assertIs(recorder.calls[3]['stderr'], subprocess.DEVNULL)

    def test_failures_do_not_stop_pipeline(self):
        recorder = RecordingRun(fail={"asc2dsp"}, missing={"rt"})
        with mock.patch("subprocess.run", recorder):
            results = run_pipeline(build_steps(self.names, 2, 2, 10))

        self.assertEqual(len(results), 6)
        by_name = {r.name: r for r in results}
        self.assertEqual(by_name["asc2dsp"].returncode, 1)
        self.assertFalse(by_name["asc2dsp"].ok)
        self.assertIsNone(by_name["rt"].returncode)
        self.assertTrue(by_name["pix2png"].ok)

    def test_strict_stops_at_first_failure(self):
        recorder = RecordingRun(fail={"asc2dsp"})
        with mock.patch("subprocess.run", recorder):
            with self.assertRaises(ToolError) as ctx:
                run_pipeline(build_steps(self.names, 2, 2, 10), strict=True)

        self.assertEqual(ctx.exception.step, "asc2dsp")
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertEqual(len(recorder.calls), 2)
        self.assertFalse(os.path.exists(self.names.mged))

    def test_stale_outputs_removed(self):
        for path in (self.names.database, self.names.pix, self.names.png):
            with open(path, 'w') as f:
                f.write("stale")

        steps = {s.name: s for s in build_steps(self.names, 2, 2, 10)}
        with open(self.names.mged, 'w') as f:
            f.write("units m\n")

        recorder = RecordingRun()
        with mock.patch("subprocess.run", recorder):
            run_step(steps["mged"])
            run_step(steps["rt"])

        self.assertFalse(os.path.exists(self.names.database))
        self.assertFalse(os.path.exists(self.names.pix))
        self.assertFalse(os.path.exists(self.names.png))

    def test_missing_stdin_file_skips_step(self):
        steps = {s.name: s for s in build_steps(self.names, 2, 2, 10)}
        recorder = RecordingRun()
        with mock.patch("subprocess.run", recorder):
            result = run_step(steps["mged"])

        self.assertIsNone(result.returncode)
        self.assertFalse(result.produced)
        self.assertEqual(recorder.calls, [])

    def test_unopenable_output_fails_step_only(self):
        names = artifact_names(os.path.join(self.tmp.name, "no_such_dir", "out"))
        recorder = RecordingRun()
        with mock.patch("subprocess.run", recorder):
            results = run_pipeline(build_steps(names, 2, 2, 10))

        self.assertEqual(len(results), 6)
        by_name = {r.name: r for r in results}
        for name in ("reverse", "mged-script", "mged", "pix2png"):
            self.assertIsNone(by_name[name].returncode)
            self.assertFalse(by_name[name].produced)
        # programs without a stream to open still run
        self.assertEqual([c['cmd'][0] for c in recorder.calls], ["asc2dsp", "rt"])


if __name__ == '__main__':
    unittest.main()
