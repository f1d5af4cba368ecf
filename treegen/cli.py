"""
Command-Line Interface

CLI for generating printable trees and listing the built-in presets.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .backends import get_available_backends
from .errors import TreeGenError
from .params.species import SPECIES_PRESETS, list_ages
from .params.styles import TREE_STYLES
from .specs.tree_spec import TreeSpec


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treegen",
        description="Printable tree generation - skeletons, foliage and STL export",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a tree and write tree.stl")
    gen_parser.add_argument(
        "--spec",
        type=str,
        default=None,
        help="JSON file with a full tree spec; other flags override it",
    )
    gen_parser.add_argument(
        "--generator", "-g",
        type=str,
        default=None,
        choices=get_available_backends(),
        help="Skeleton generator (default: realistic)",
    )
    gen_parser.add_argument(
        "--species",
        type=str,
        default=None,
        help="Species preset for the realistic generator (default: linden)",
    )
    gen_parser.add_argument(
        "--age",
        type=str,
        default=None,
        help="Age modifier for the realistic generator (default: mature)",
    )
    gen_parser.add_argument(
        "--height",
        type=float,
        default=None,
        help="Tree height in model units (default: 15)",
    )
    gen_parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed (default: 42)",
    )
    gen_parser.add_argument(
        "--foliage",
        type=str,
        default=None,
        metavar="STYLE",
        help="Add foliage with the given tree or crown style",
    )
    gen_parser.add_argument(
        "--model-scale",
        type=float,
        default=None,
        help="Print ratio, e.g. 200 for 1:200 (default: 1)",
    )
    gen_parser.add_argument(
        "--output", "-O",
        type=str,
        default=None,
        help="Output directory (default: ./output)",
    )
    gen_parser.add_argument(
        "--progress",
        action="store_true",
        help="Show assembly progress bars",
    )

    subparsers.add_parser("species", help="List species presets and age modifiers")
    subparsers.add_parser("styles", help="List foliage tree styles")

    for p in subparsers.choices.values():
        p.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output",
        )

    return parser


def spec_from_args(args) -> TreeSpec:
    """Build a TreeSpec from ``--spec`` plus command-line overrides."""
    spec = TreeSpec.from_json(args.spec) if args.spec else TreeSpec()

    if args.generator is not None:
        spec.generator = args.generator
    if args.species is not None:
        spec.species = args.species
    if args.age is not None:
        spec.age = args.age
    if args.height is not None:
        spec.height = args.height
    if args.seed is not None:
        spec.seed = args.seed
    if args.foliage is not None:
        spec.foliage.enabled = True
        spec.foliage.style = args.foliage
    if args.model_scale is not None:
        spec.export.model_scale = args.model_scale
    if args.output is not None:
        spec.export.output_dir = args.output

    spec.validate()
    return spec


def run_generate(args) -> int:
    """Run the generate command."""
    from .api.generate import run_tree

    try:
        spec = spec_from_args(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Generating {spec.generator} tree (height {spec.height}, seed {spec.seed})...")
    try:
        report = run_tree(spec, progress=args.progress)
    except TreeGenError as e:
        print(f"Error [{e.stage}]: {e.message}", file=sys.stderr)
        return 1

    assembly = report.metadata["assembly"]
    print(f"Segments: {report.metadata['skeleton']['segment_count']}")
    print(f"Triangles: {assembly['triangle_count']}")
    for kind, path in report.metadata["outputs"].items():
        print(f"Wrote {kind}: {path}")
    for warning in report.warnings:
        print(f"Warning: {warning}")
    return 0


def run_species(args) -> int:
    """Run the species command."""
    print("Species:")
    for name, preset in SPECIES_PRESETS.items():
        print(f"  {name:<10} crown={preset.crown_shape:<10} levels={preset.max_branch_levels}")
    print("Ages:")
    for name in list_ages():
        print(f"  {name}")
    return 0


def run_styles(args) -> int:
    """Run the styles command."""
    print("Tree styles:")
    for name, style in TREE_STYLES.items():
        print(f"  {name:<10} crown={style.crown_style:<10} density={style.crown_density}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Execute command
    if args.command == "generate":
        return run_generate(args)
    elif args.command == "species":
        return run_species(args)
    return run_styles(args)


if __name__ == "__main__":
    sys.exit(main())
