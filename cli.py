#!/usr/bin/env python
"""
Command-line interface for the lot carving and building generator

Usage:
    python cli.py generate --streets streets.json --mode courtyard --output buildings.json
    python cli.py generate --grid 4 --spacing 120 --summary
    python cli.py blocks --grid 3 --spacing 100
"""

import os
import sys
import json
import argparse
from typing import List

from loguru import logger

from citylots import BuildingsOrchestrator, CameraState, GeneratorConfig


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def grid_streets(count: int, spacing: float) -> List[List[List[float]]]:
    """Square street grid with count x count blocks"""
    extent = count * spacing
    streets = []
    for i in range(count + 1):
        offset = i * spacing
        streets.append([[0.0, offset], [extent, offset]])
        streets.append([[offset, 0.0], [offset, extent]])
    return streets


def load_streets(args) -> List[List[List[float]]]:
    """Street polylines from --streets, or a generated grid"""
    if args.streets:
        if not os.path.exists(args.streets):
            raise FileNotFoundError(f"Streets file not found: {args.streets}")
        with open(args.streets, "r", encoding="utf-8") as f:
            data = json.load(f)
        # Accept a bare list of polylines or {"streets": [...]}
        if isinstance(data, dict):
            data = data.get("streets", [])
        return data
    return grid_streets(args.grid, args.spacing)


def build_config(args) -> GeneratorConfig:
    config = GeneratorConfig(mode=args.mode, seed=args.seed)
    if args.min_area is not None:
        config.lots.min_area = args.min_area
    if args.shrink_spacing is not None:
        config.lots.shrink_spacing = args.shrink_spacing
    if args.courtyard_depth is not None:
        config.courtyard.courtyard_depth = args.courtyard_depth
    if args.depth_basis is not None:
        config.courtyard.depth_basis = args.depth_basis
    if args.min_height is not None:
        config.heights.min_height = args.min_height
    if args.height_range is not None:
        config.heights.height_range = args.height_range
    return config


def build_camera(args) -> CameraState:
    return CameraState(
        zoom=args.zoom,
        orthographic=args.orthographic
    )


def cmd_generate(args):
    """Generate lots and buildings for a street network"""
    setup_logging(args.verbose)

    try:
        streets = load_streets(args)
        orchestrator = BuildingsOrchestrator(build_config(args))
        orchestrator.set_streets(streets)
        summary = orchestrator.generate()

        buildings = orchestrator.buildings(build_camera(args))
        logger.info(f"✓ Generated {summary.buildings} buildings on {summary.blocks} blocks")

        if args.output:
            os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
            with open(args.output, "w", encoding="utf-8") as f:
                json.dump({
                    "summary": summary.model_dump(),
                    "buildings": [b.model_dump() for b in buildings]
                }, f, indent=2)
            logger.info(f"Saved buildings to {args.output}")

        if args.summary:
            print(json.dumps(summary.model_dump(), indent=2))

        return 0

    except (ValueError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Failed to generate buildings: {e}")
        return 1


def cmd_blocks(args):
    """Print the shrunk blocks of a street network"""
    setup_logging(args.verbose)

    try:
        streets = load_streets(args)
        orchestrator = BuildingsOrchestrator(build_config(args))
        orchestrator.set_streets(streets)
        blocks = orchestrator.get_blocks(build_camera(args))
    except (ValueError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Failed to find blocks: {e}")
        return 1

    logger.info(f"Found {len(blocks)} blocks")
    print(json.dumps([[list(p) for p in block] for block in blocks], indent=2))
    return 0


def add_common_arguments(parser):
    parser.add_argument("--streets", help="JSON file with street polylines [[[x, y], ...], ...]")
    parser.add_argument("--grid", type=int, default=3, help="Blocks per side of a generated grid (no --streets)")
    parser.add_argument("--spacing", type=float, default=100.0, help="Grid street spacing in world units")
    parser.add_argument("--mode", choices=["divide", "courtyard"], default="divide", help="Carving mode")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--min-area", type=float, help="Minimum lot area")
    parser.add_argument("--shrink-spacing", type=float, help="Street setback")
    parser.add_argument("--courtyard-depth", type=float, help="Maximum courtyard depth")
    parser.add_argument("--depth-basis", choices=["perimeter", "sqrt_area"], help="Courtyard depth scaling")
    parser.add_argument("--min-height", type=float, help="Minimum building height")
    parser.add_argument("--height-range", type=float, help="Building height range")
    parser.add_argument("--zoom", type=float, default=1.0, help="Camera zoom")
    parser.add_argument("--orthographic", action="store_true", help="Orthographic projection")


def main():
    parser = argparse.ArgumentParser(
        description="City lot and building generator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Generate courtyard blocks on a 4x4 grid:
    python cli.py generate --grid 4 --spacing 120 --mode courtyard --summary

  Generate from a street file:
    python cli.py generate --streets streets.json --output buildings.json

  List shrunk blocks:
    python cli.py blocks --grid 2
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    gen_parser = subparsers.add_parser("generate", help="Generate lots and buildings")
    add_common_arguments(gen_parser)
    gen_parser.add_argument("--output", "-o", help="Output JSON file")
    gen_parser.add_argument("--summary", "-s", action="store_true", help="Print summary to stdout")
    gen_parser.set_defaults(func=cmd_generate)

    blocks_parser = subparsers.add_parser("blocks", help="Print shrunk blocks")
    add_common_arguments(blocks_parser)
    blocks_parser.set_defaults(func=cmd_blocks)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
