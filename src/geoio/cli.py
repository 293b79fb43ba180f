"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import math
import sys

from geoio.config import settings
from geoio.io import Format, fetch_region, format_for, load, save

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure logging for the command line."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _info(args: argparse.Namespace) -> None:
    geotable = load(args.path, layer=args.layer, lazy=args.lazy)
    logger.info(
        "%s: %s codec, %s domain, %d rows, columns=%s",
        args.path,
        format_for(args.path).value,
        type(geotable.domain).__name__,
        len(geotable),
        geotable.columns,
    )


def _convert(args: argparse.Namespace) -> None:
    geotable = load(args.source, layer=args.layer)
    options = {"force": True} if args.force and format_for(args.target) is Format.SHAPEFILE else {}
    save(args.target, geotable, **options)
    logger.info("Converted %s -> %s (%d rows)", args.source, args.target, len(geotable))


def _gadm(args: argparse.Namespace) -> None:
    geotable = fetch_region(
        args.country,
        *args.subregions,
        depth=args.depth,
        tolerance=args.tolerance,
        min_vertices=args.min,
        max_vertices=args.max if args.max is not None else math.inf,
        max_iterations=args.maxiter,
    )
    save(args.output, geotable)
    logger.info("Saved %d GADM regions to %s", len(geotable), args.output)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoio", description="Load, convert and fetch geospatial tables."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="Describe a geospatial file")
    info.add_argument("path")
    info.add_argument("--layer", type=int, default=0)
    info.add_argument("--lazy", action="store_true")
    info.set_defaults(handler=_info)

    convert = commands.add_parser("convert", help="Convert between formats")
    convert.add_argument("source")
    convert.add_argument("target")
    convert.add_argument("--layer", type=int, default=0)
    convert.add_argument("--force", action="store_true", help="Overwrite an existing shapefile")
    convert.set_defaults(handler=_convert)

    gadm = commands.add_parser("gadm", help="Download GADM boundaries")
    gadm.add_argument("country")
    gadm.add_argument("subregions", nargs="*")
    gadm.add_argument("--output", "-o", required=True)
    gadm.add_argument("--depth", type=int, default=0)
    gadm.add_argument("--tolerance", type=float, default=None)
    gadm.add_argument("--min", type=int, default=3)
    gadm.add_argument("--max", type=int, default=None)
    gadm.add_argument("--maxiter", type=int, default=10)
    gadm.set_defaults(handler=_gadm)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a command; returns the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        args.handler(args)
    except Exception:
        logger.exception("geoio %s failed", args.command)
        return 1
    return 0


def run() -> None:
    """Console script entry point."""
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
