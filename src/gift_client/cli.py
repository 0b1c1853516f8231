"""
Command-line interface for gift-client.

Each sub-command resolves the GIFT version once, runs one workflow and
writes the resulting table as CSV to stdout (or ``--output``).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

from gift_client import __version__, workflows
from gift_client.analysis.env_aggregation import normalize_raster_specs
from gift_client.config import get_settings
from gift_client.datasources.gift import fetch_references, fetch_versions, resolve_version
from gift_client.errors import GiftError
from gift_client.logging_config import setup_logging
from gift_client.schemas import ChecklistCriteria, EntityClass, RasterSpec, RefSubset, RefType


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="gift-client",
        description="Query checklists, polygons and environmental data from GIFT",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--gift-version",
        default=None,
        help="GIFT database version: 'latest', 'beta' or e.g. '3.2' (default: from settings)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")
    subparsers.add_parser("versions", help="List published GIFT versions")

    refs = subparsers.add_parser("references", help="Reference metadata")
    refs.add_argument("-o", "--output", type=Path, default=None, help="CSV file (default: stdout)")

    lists = subparsers.add_parser("checklists", help="Checklists fulfilling criteria")
    lists.add_argument(
        "--taxon", default="Tracheophyta", help="Taxonomic group (default: Tracheophyta)"
    )
    lists.add_argument(
        "--ref-included",
        nargs="+",
        choices=[s.value for s in RefSubset],
        default=None,
        help="Status subsets to keep",
    )
    lists.add_argument("--ref-excluded", nargs="+", type=int, default=[], help="ref_IDs to ignore")
    lists.add_argument(
        "--type-ref",
        nargs="+",
        choices=[t.value for t in RefType],
        default=None,
        help="Reference types",
    )
    lists.add_argument(
        "--entity-class",
        nargs="+",
        choices=[c.value for c in EntityClass],
        default=None,
        help="Polygon classes",
    )
    for flag in ("native-indicated", "natural-indicated", "end-ref", "end-list", "suit-geo"):
        column = flag.replace("-", "_")
        lists.add_argument(f"--{flag}", action="store_true", help=f"Require {column} = 1")
    lists.add_argument(
        "--no-complete-taxon",
        dest="complete_taxon",
        action="store_false",
        help="Keep polygons whose checklists only cover part of the taxon",
    )
    lists.add_argument("-o", "--output", type=Path, default=None, help="CSV file (default: stdout)")

    env = subparsers.add_parser("env", help="Environmental variables per polygon")
    env.add_argument(
        "--entity-ids", nargs="+", type=int, default=None, help="Polygons (default: all)"
    )
    env.add_argument(
        "--misc", nargs="+", default=["area"], help="Miscellaneous variables (default: area)"
    )
    env.add_argument(
        "--raster",
        nargs="+",
        default=[],
        metavar="LAYER[:STAT,STAT]",
        help="Raster layers, optionally with their own statistics",
    )
    env.add_argument(
        "--sumstat", nargs="+", default=["mean"], help="Default statistics (default: mean)"
    )
    env.add_argument(
        "--strict", action="store_true", help="Fail when no requested polygon has data"
    )
    env.add_argument("-o", "--output", type=Path, default=None, help="CSV file (default: stdout)")

    overlap = subparsers.add_parser("no-overlap", help="Drop overlapping polygons")
    overlap.add_argument(
        "--entity-ids", nargs="+", type=int, required=True, help="Candidate polygons"
    )
    overlap.add_argument("--area-th-mainland", type=float, default=100.0)
    overlap.add_argument("--area-th-island", type=float, default=0.0)
    overlap.add_argument("--overlap-th", type=float, default=0.1)

    return parser


def parse_raster_args(values: list[str], default_stats: list[str]) -> list[RasterSpec]:
    """Turn ``LAYER[:STAT,STAT]`` arguments into raster specs."""
    specs = []
    for value in values:
        layer, _, stats = value.partition(":")
        if stats:
            specs.append(RasterSpec.from_options(layer, stats.split(",")))
        else:
            specs.extend(normalize_raster_specs([layer], default_stats))
    return specs


def _gift_version(args: argparse.Namespace) -> str:
    requested = getattr(args, "gift_version", None) or get_settings().gift_version
    return resolve_version(requested)


def _write_table(df: pd.DataFrame, output: Path | None) -> None:
    if output is None:
        df.to_csv(sys.stdout, index=False)
    else:
        df.to_csv(output, index=False)
        print(f"Wrote {len(df)} rows to {output}", file=sys.stderr)


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"API: {settings.api_url}")
    print(f"GIFT version: {settings.gift_version}")
    print(f"Debug: {settings.debug}")
    return 0


def cmd_versions(_args: argparse.Namespace) -> int:
    """Handle the 'versions' command."""
    _write_table(fetch_versions(), None)
    return 0


def cmd_references(args: argparse.Namespace) -> int:
    """Handle the 'references' command."""
    _write_table(fetch_references(_gift_version(args)), args.output)
    return 0


def cmd_checklists(args: argparse.Namespace) -> int:
    """Handle the 'checklists' command."""
    options = {
        "taxon_name": args.taxon,
        "ref_excluded": args.ref_excluded,
        "native_indicated": args.native_indicated,
        "natural_indicated": args.natural_indicated,
        "end_ref": args.end_ref,
        "end_list": args.end_list,
        "suit_geo": args.suit_geo,
        "complete_taxon": args.complete_taxon,
    }
    for key in ("ref_included", "type_ref", "entity_class"):
        if getattr(args, key) is not None:
            options[key] = getattr(args, key)
    criteria = ChecklistCriteria.from_options(**options)

    result = workflows.checklist_conditional(criteria, _gift_version(args))
    _write_table(result, args.output)
    return 0


def cmd_env(args: argparse.Namespace) -> int:
    """Handle the 'env' command."""
    specs = parse_raster_args(args.raster, args.sumstat)
    result = workflows.get_env(
        args.entity_ids, args.misc, specs, _gift_version(args), strict=args.strict
    )
    _write_table(result, args.output)
    return 0


def cmd_no_overlap(args: argparse.Namespace) -> int:
    """Handle the 'no-overlap' command."""
    resolution = workflows.no_overlap(
        args.entity_ids,
        _gift_version(args),
        area_th_mainland=args.area_th_mainland,
        area_th_island=args.area_th_island,
        overlap_th=args.overlap_th,
    )
    print("retained: " + " ".join(str(i) for i in resolution.retained))
    print("removed: " + " ".join(str(i) for i in resolution.removed))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.debug else get_settings().log_level)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "versions": cmd_versions,
        "references": cmd_references,
        "checklists": cmd_checklists,
        "env": cmd_env,
        "no-overlap": cmd_no_overlap,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except GiftError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
