#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Main entry point for the DEM conversion tool.

This script opens an SDTS (or any GDAL-readable) elevation model, writes its
grid as ASCII and, when an output base name is given, drives the external
solid-modeling toolchain that turns the grid into a rendered image.
"""
import sys
import time
import argparse
from typing import List, Optional

from sdts_dem2asc import __version__
from sdts_dem2asc.core.config import (
    DEFAULT_CHOP_OFFSET, EXPORT_CONFIG, RENDER_CONFIG, load_config_file
)
from sdts_dem2asc.core.exceptions import Dem2AscError, UsageError
from sdts_dem2asc.core.logging_config import setup_logging, get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

# Flags whose value is optional; a bare flag means "use the default"
OPTIONAL_VALUE_FLAGS = ("--chop", "--save-metadata")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def _usage_epilog() -> str:
    size = RENDER_CONFIG["pixel_size"]
    az, el = RENDER_CONFIG["azimuth"], RENDER_CONFIG["elevation"]
    return (
        "Without options, prints the grid to stdout and the pixel/scale\n"
        "summary to stderr.\n"
        "\n"
        "Outputs with --name=X:\n"
        "  X.asc\n"
        "  X.info\n"
        "  X-reversed.asc\n"
        "  X.dsp\n"
        "  X.mged\n"
        f"  X.g (with X.r inside, az/el: {az}/{el})\n"
        f"  X-az{az}-el{el}.pix ({size}x{size})\n"
        f"  X-az{az}-el{el}.png\n"
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command line parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser for the ``sdtsdem2asc`` command.
    """
    parser = _ArgumentParser(
        prog="sdtsdem2asc",
        allow_abbrev=False,
        description="Convert an SDTS DEM into an ASCII elevation grid.",
        epilog=_usage_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the SDTS CATD file (e.g. 1107CATD.DDF) or any GDAL raster"
    )

    parser.add_argument(
        "--info",
        action="store_true",
        help="Print information about the input file and exit"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="For developer use: print non-negative pixels as pixel[col,row] = value"
    )

    parser.add_argument(
        "--chop",
        metavar="X",
        help=f"Chop cell heights to a base level of X below the minimum height "
             f"(default: {DEFAULT_CHOP_OFFSET}). X must be >= 1. Use --chop or --chop=X"
    )

    parser.add_argument(
        "--name",
        metavar="X",
        help="Use X as the base for output file names and run the artifact pipeline"
    )

    parser.add_argument(
        "--save-metadata",
        metavar="FORMAT",
        help="With --name, also write X-metadata.json or X-metadata.yaml "
             "(use --save-metadata or --save-metadata=yaml)"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop the artifact pipeline at the first failed step"
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while reading scanlines"
    )

    parser.add_argument(
        "--config",
        help="Path to a YAML configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"sdtsdem2asc v{__version__}"
    )

    return parser


def _normalize_optional_values(argv: List[str]) -> List[str]:
    # A bare optional-value flag never consumes the next argument
    return [f"{arg}=" if arg in OPTIONAL_VALUE_FLAGS else arg for arg in argv]


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Parameters
    ----------
    argv : list, optional
        Arguments without the program name, by default ``sys.argv[1:]``.

    Returns
    -------
    argparse.Namespace
        Parsed arguments; ``chop`` is None or the integer offset and
        ``save_metadata`` is None or the format name.

    Raises
    ------
    UsageError
        For unknown arguments, a missing input file or bad flag values.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    args = build_parser().parse_args(_normalize_optional_values(argv))

    if not args.input:
        raise UsageError("No input file was entered")

    if args.chop is not None:
        if args.chop == "":
            args.chop = DEFAULT_CHOP_OFFSET
        else:
            try:
                args.chop = int(args.chop)
            except ValueError:
                raise UsageError(f"Chop elevation '{args.chop}' is not an integer.") from None
        if args.chop < 1:
            raise UsageError(f"Chop elevation '{args.chop}' is less than 1.")

    if args.save_metadata is not None:
        if not args.name:
            raise UsageError("--save-metadata requires --name")
        if args.save_metadata not in ("", "json", "yaml"):
            raise UsageError(f"Unknown metadata format '{args.save_metadata}' "
                             f"(choose from 'json', 'yaml')")

    return args


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the converter.

    Returns
    -------
    int
        Exit code: 0 on success (including ``--info``), 1 on any error.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        build_parser().print_help(sys.stdout)
        return 1

    try:
        args = parse_arguments(argv)
        if args.config:
            load_config_file(args.config)
    except Dem2AscError as e:
        print(f"ERROR:  {e}...exiting.", file=sys.stderr)
        return 1

    setup_logging(log_level=args.log_level)

    try:
        return convert(args)
    except Dem2AscError as e:
        logger.debug("Conversion failed", exc_info=True)
        print(f"FATAL:  {e}", file=sys.stderr)
        return 1
    except OSError as e:
        # Write failures after an output file was opened, e.g. a full disk
        logger.debug("Conversion failed", exc_info=True)
        print(f"FATAL:  {e}", file=sys.stderr)
        return 1


def convert(args: argparse.Namespace) -> int:
    """
    Convert one dataset.

    Parameters
    ----------
    args : argparse.Namespace
        Arguments from ``parse_arguments``.

    Returns
    -------
    int
        Exit code.
    """
    # Import here so --help and usage errors do not need GDAL
    from sdts_dem2asc.core.io import get_band, load_dataset, open_output
    from sdts_dem2asc.grid.extractor import extract_grid
    from sdts_dem2asc.grid.info import write_info_report
    from sdts_dem2asc.pipeline.steps import artifact_names, build_steps, run_pipeline
    from sdts_dem2asc.utils.metadata import (
        add_step_results, build_metadata, save_metadata, write_run_summary
    )

    start_time = time.time()
    logger.info(f"Starting conversion of {args.input}")

    loaded = load_dataset(args.input, info=args.info)

    if args.info:
        write_info_report(loaded, sys.stdout)
        return 0

    band = get_band(loaded.dataset)
    names = artifact_names(args.name) if args.name else None

    write_run_summary(band.XSize, band.YSize, loaded.scale,
                      path=names.info if names else None)

    options = dict(
        chop=args.chop is not None,
        chop_offset=args.chop or DEFAULT_CHOP_OFFSET,
        debug=args.debug,
        progress=args.progress,
    )
    if names:
        with open_output(names.asc) as out:
            summary = extract_grid(band, out, **options)
        logger.info(f"Wrote grid to {names.asc}")
    else:
        summary = extract_grid(band, sys.stdout, **options)
        sys.stdout.flush()

    metadata = build_metadata(args.input, loaded, summary) if args.save_metadata is not None else None
    scale = loaded.scale

    # Close the dataset before any external program runs
    band = None
    loaded = None

    if names is None:
        logger.info(f"Conversion completed in {time.time() - start_time:.2f} seconds")
        return 0

    steps = build_steps(names, summary.width, summary.height, scale.x)
    results = run_pipeline(steps, strict=True if args.strict else None)

    files = [names.asc, names.info] + [result.output for result in results]

    if metadata is not None:
        fmt = args.save_metadata or EXPORT_CONFIG.get("metadata_format", "json")
        metadata_path = f"{args.name}-metadata.{fmt}"
        save_metadata(add_step_results(metadata, results), metadata_path, format=fmt)
        files.append(metadata_path)

    s = "s" if len(files) > 1 else ""
    print(f"Normal end.  See file{s}:")
    for path in files:
        print(f"  {path}")

    logger.info(f"Conversion completed in {time.time() - start_time:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
