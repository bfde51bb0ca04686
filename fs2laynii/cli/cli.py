"""Command line parsing and logging setup for fs2laynii."""

import argparse
import logging
import sys
from typing import List, Optional

from fs2laynii.utils.defaults import (
    DEFAULT_ARITHMETIC,
    DEFAULT_EXPAND,
    DEFAULT_N_LAYERS,
    DEFAULT_RESOLUTION,
    DEFAULT_SHRINK,
)

# Between INFO and WARNING: progress lines shown by default
MINIMAL = 25
logging.addLevelName(MINIMAL, "MINIMAL")

VERBOSITY_LEVELS = {
    "silent": logging.WARNING,
    "minimal": MINIMAL,
    "verbose": logging.INFO,
    "debug": logging.DEBUG,
}

DESCRIPTION = """
Convert a Freesurfer reconstruction into LayNii rim volumes and,
optionally, run LN2_LAYERS on them.

All outputs are written to <subjects_dir>/<subject>/laynii/. Every step is
skipped when its output already exists, so an interrupted run can simply be
started again.
"""

EPILOG = """
examples:
  fs2laynii -d /data/freesurfer -s sub-01
  fs2laynii -d /data/freesurfer -s sub-01 -m t -p 0.3 -w -0.3 -x d
  fs2laynii -d /data/freesurfer -s sub-01 -l 1     # rims only, no layering
"""


def log_minimal(logger: logging.Logger, message: str) -> None:
    """Log a progress line at the MINIMAL level."""
    logger.log(MINIMAL, message)


def configure_logging(verbosity: str = "minimal") -> None:
    """Configure the root logger for the requested verbosity."""
    level = VERBOSITY_LEVELS.get(verbosity, MINIMAL)
    if level <= logging.DEBUG:
        fmt = "%(asctime)s %(name)s %(levelname)s: %(message)s"
    elif level <= logging.INFO:
        fmt = "%(levelname)s: %(message)s"
    else:
        fmt = "%(message)s"
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr, force=True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.
    
    The built-in help is replaced so that -h exits with a non-zero status,
    like a bare invocation.
    """
    parser = argparse.ArgumentParser(
        prog="fs2laynii",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False
    )
    
    required = parser.add_argument_group("required arguments")
    required.add_argument(
        "-d",
        dest="subjects_dir",
        metavar="SUBJECTS_DIR",
        help="Freesurfer subjects directory"
    )
    required.add_argument(
        "-s",
        dest="subject",
        metavar="SUBJECT",
        help="Subject identifier inside SUBJECTS_DIR"
    )
    
    options = parser.add_argument_group("pipeline options")
    options.add_argument(
        "-m",
        dest="metric",
        metavar="{t,d}",
        help="Boundary metric: t=thickness, d=distance (default: d)"
    )
    options.add_argument(
        "-r",
        dest="resolution",
        metavar="MM",
        help=f"Target isotropic resolution in mm (default: {DEFAULT_RESOLUTION})"
    )
    options.add_argument(
        "-p",
        dest="expand",
        metavar="FACTOR",
        help=f"Expand factor (default: {DEFAULT_EXPAND})"
    )
    options.add_argument(
        "-w",
        dest="shrink",
        metavar="FACTOR",
        help=f"Shrink factor (default: {DEFAULT_SHRINK})"
    )
    options.add_argument(
        "-n",
        dest="n_layers",
        metavar="N",
        help=f"Number of layers, odd and positive (default: {DEFAULT_N_LAYERS})"
    )
    options.add_argument(
        "-x",
        dest="model",
        metavar="{v,d}",
        help="Layering model: v=equivolume, d=equidistant (default: v)"
    )
    options.add_argument(
        "-l",
        dest="stop_layering",
        metavar="VALUE",
        help="Stop before layering; unset or 0 runs layering, any other value skips it"
    )
    options.add_argument(
        "-h",
        dest="show_help",
        action="store_true",
        help="Show this help message and exit"
    )
    
    extra = parser.add_argument_group("additional options")
    extra.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first failed step instead of carrying on"
    )
    extra.add_argument(
        "--force-layering",
        action="store_true",
        help="Re-run LN2_LAYERS even when its outputs exist"
    )
    extra.add_argument(
        "--arithmetic",
        choices=["numpy", "fscalc"],
        default=DEFAULT_ARITHMETIC,
        help=f"Voxel arithmetic backend (default: {DEFAULT_ARITHMETIC})"
    )
    extra.add_argument(
        "--report",
        metavar="PATH",
        help="Write a tab-separated report of every step to PATH"
    )
    extra.add_argument(
        "--verbosity",
        choices=list(VERBOSITY_LEVELS),
        default="minimal",
        help="Logging verbosity (default: minimal)"
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.
    
    Prints help and exits with status 1 when called without arguments,
    with -h, or without the required -d and -s.
    """
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)
    
    if not argv:
        parser.print_help()
        sys.exit(1)
    
    args = parser.parse_args(argv)
    
    if args.show_help:
        parser.print_help()
        sys.exit(1)
    
    missing = [flag for flag, value in (("-d", args.subjects_dir), ("-s", args.subject)) if not value]
    if missing:
        parser.print_help()
        print(f"\nerror: missing required argument(s): {', '.join(missing)}", file=sys.stderr)
        sys.exit(1)
    
    return args
