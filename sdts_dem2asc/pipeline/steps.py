#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Artifact pipeline steps.

The pipeline is an ordered list of steps, each producing one file:

1. reverse the grid's line order (``X-reversed.asc``)
2. convert it to a displacement map (``X.dsp``)
3. write the solid-modeling script (``X.mged``)
4. compile the script into a model database (``X.g``)
5. render the model (``X-az35-el25.pix``)
6. convert the render to PNG (``X-az35-el25.png``)

By default a failed step is logged and the pipeline carries on, so a
failure shows up as a missing or empty downstream file. Strict mode stops
at the first failure instead.
"""
import os
import subprocess
from contextlib import ExitStack
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from sdts_dem2asc.core.config import PIPELINE_CONFIG, RENDER_CONFIG, TOOLS_CONFIG
from sdts_dem2asc.core.exceptions import ToolError
from sdts_dem2asc.core.logging_config import get_module_logger
from sdts_dem2asc.pipeline.mged import build_mged_script, write_mged_script
from sdts_dem2asc.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)


class ArtifactNames(NamedTuple):
    """File and object names derived from the output base name."""
    asc: str
    info: str
    reversed: str
    dsp: str
    mged: str
    database: str
    pix: str
    png: str
    solid: str
    region: str


def artifact_names(basename: str, azimuth: Optional[int] = None,
                   elevation: Optional[int] = None) -> ArtifactNames:
    """
    Derive every output name from ``basename``.

    Azimuth and elevation default to the render configuration and are
    embedded in the image file names.
    """
    az = RENDER_CONFIG["azimuth"] if azimuth is None else azimuth
    el = RENDER_CONFIG["elevation"] if elevation is None else elevation
    view = f"{basename}-az{az}-el{el}"
    return ArtifactNames(
        asc=f"{basename}.asc",
        info=f"{basename}.info",
        reversed=f"{basename}-reversed.asc",
        dsp=f"{basename}.dsp",
        mged=f"{basename}.mged",
        database=f"{basename}.g",
        pix=f"{view}.pix",
        png=f"{view}.png",
        solid=f"{basename}.s",
        region=f"{basename}.r",
    )


class ArtifactStep(NamedTuple):
    """
    One pipeline step.

    Either ``command`` (an external program) or ``action`` (an in-process
    writer called with the output path) is set.
    """
    name: str
    output: str
    inputs: Tuple[str, ...] = ()
    command: Optional[List[str]] = None
    action: Optional[Callable[[str], Any]] = None
    stdin_from: Optional[str] = None  # file fed on stdin
    stdout_to_output: bool = False    # program writes its result on stdout
    quiet: bool = False               # discard stdout and stderr
    remove_first: Tuple[str, ...] = ()


class StepResult(NamedTuple):
    """Outcome of one step. ``returncode`` is None if nothing ran."""
    name: str
    returncode: Optional[int]
    output: str
    produced: bool

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def build_steps(names: ArtifactNames, width: int, height: int, cell_size: int,
                render: Optional[Dict[str, Any]] = None,
                tools: Optional[Dict[str, str]] = None) -> List[ArtifactStep]:
    """
    Build the ordered step list for one grid.

    Parameters
    ----------
    names : ArtifactNames
        Output names, see ``artifact_names``.
    width, height : int
        Grid dimensions in cells.
    cell_size : int
        Horizontal cell size in meters.
    render : dict, optional
        Render settings (``azimuth``, ``elevation``, ``pixel_size``),
        by default ``RENDER_CONFIG``.
    tools : dict, optional
        Executable names, by default ``TOOLS_CONFIG``.

    Returns
    -------
    list
        Steps in execution order.
    """
    render = render or RENDER_CONFIG
    tools = tools or TOOLS_CONFIG
    size = render["pixel_size"]
    script = build_mged_script(names.solid, names.region, names.dsp,
                               width, height, cell_size)

    return [
        ArtifactStep(
            name="reverse",
            output=names.reversed,
            inputs=(names.asc,),
            command=[tools["reverse"], names.asc],
            stdout_to_output=True,
        ),
        ArtifactStep(
            name="asc2dsp",
            output=names.dsp,
            inputs=(names.reversed,),
            command=[tools["asc2dsp"], names.reversed, names.dsp],
        ),
        ArtifactStep(
            name="mged-script",
            output=names.mged,
            inputs=(names.dsp,),
            action=lambda path: write_mged_script(path, script),
        ),
        ArtifactStep(
            name="mged",
            output=names.database,
            inputs=(names.mged,),
            command=[tools["mged"], "-c", names.database],
            stdin_from=names.mged,
            remove_first=(names.database,),
        ),
        ArtifactStep(
            name="rt",
            output=names.pix,
            inputs=(names.database,),
            command=[tools["rt"], "-R", "-o", names.pix, f"-s{size}",
                     f"-a{render['azimuth']}", f"-e{render['elevation']}",
                     names.database, names.region],
            quiet=True,
            remove_first=(names.pix, names.png),
        ),
        ArtifactStep(
            name="pix2png",
            output=names.png,
            inputs=(names.pix,),
            command=[tools["pix2png"], f"-s{size}", names.pix],
            stdout_to_output=True,
        ),
    ]


def _remove_stale(paths: Tuple[str, ...]) -> None:
    for path in paths:
        try:
            os.remove(path)
            logger.debug(f"Removed stale {path}")
        except FileNotFoundError:
            pass


def _produced(path: str) -> bool:
    return os.path.isfile(path) and os.path.getsize(path) > 0


def run_step(step: ArtifactStep) -> StepResult:
    """
    Run one step and report its outcome.

    Missing inputs are only logged; a program that cannot cope with them
    fails on its own. A file fed on stdin must exist or the step is skipped.
    A stream that cannot be opened fails the step like a missing program.
    """
    _remove_stale(step.remove_first)

    missing = [path for path in step.inputs if not os.path.exists(path)]
    if missing:
        logger.warning(f"Step '{step.name}' runs without input(s): {', '.join(missing)}")

    if step.action is not None:
        try:
            step.action(step.output)
            returncode: Optional[int] = 0
        except OSError as e:
            logger.warning(f"Step '{step.name}' could not write {step.output}: {e}")
            returncode = None
        return StepResult(step.name, returncode, step.output, _produced(step.output))

    if step.stdin_from and not os.path.exists(step.stdin_from):
        logger.warning(f"Step '{step.name}' skipped: {step.stdin_from} does not exist")
        return StepResult(step.name, None, step.output, _produced(step.output))

    logger.info(f"Running: {' '.join(step.command)}")
    with ExitStack() as stack:
        try:
            stdin = stack.enter_context(open(step.stdin_from, 'rb')) if step.stdin_from else subprocess.DEVNULL
            if step.quiet:
                stdout = subprocess.DEVNULL
            elif step.stdout_to_output:
                stdout = stack.enter_context(open(step.output, 'wb'))
            else:
                stdout = None
            completed = subprocess.run(
                step.command,
                stdin=stdin,
                stdout=stdout,
                stderr=subprocess.DEVNULL if step.quiet else None,
                check=False,
            )
            returncode = completed.returncode
        except OSError as e:
            logger.warning(f"Step '{step.name}' could not run {step.command[0]}: {e}")
            returncode = None

    result = StepResult(step.name, returncode, step.output, _produced(step.output))
    if not result.ok:
        logger.warning(f"Step '{step.name}' failed (exit status {returncode}); "
                       f"{step.output} may be missing or empty")
    return result


@timer
def run_pipeline(steps: List[ArtifactStep], strict: Optional[bool] = None) -> List[StepResult]:
    """
    Run steps in order.

    Parameters
    ----------
    steps : list
        Steps from ``build_steps``.
    strict : bool, optional
        Raise ``ToolError`` at the first failed step. Defaults to
        ``PIPELINE_CONFIG['strict']``.

    Returns
    -------
    list
        One ``StepResult`` per step that was run.
    """
    strict = PIPELINE_CONFIG.get("strict", False) if strict is None else strict
    results = []
    for step in steps:
        result = run_step(step)
        results.append(result)
        if strict and not result.ok:
            raise ToolError(step.name, result.returncode,
                            f"{step.output} was not produced")
    return results
