"""CLI entry point for slidekit.

Orchestrates the pipeline: deck ingestion, schema normalization, PPTX
generation and QA validation.

Usage::

    # List the built-in layouts
    python -m slidekit.cli layouts

    # Show a layout's data contract (as YAML for the generation pipeline)
    python -m slidekit.cli inspect --layout chart-with-caption --yaml

    # Check deck data against the layout schemas
    python -m slidekit.cli validate --deck deck.yaml

    # Build a presentation
    python -m slidekit.cli generate --deck deck.yaml -o output/deck.pptx

    # Build with a custom design system
    python -m slidekit.cli generate --deck deck.json \\
        --design design.yaml -o output/deck.pptx
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from slidekit.errors import DeckValidationError, LayoutNotFoundError
from slidekit.generator.pptx_builder import PPTXBuilder
from slidekit.processor.ingestion import DeckFormatError, load_deck
from slidekit.qa.validator import QAValidator
from slidekit.registry import default_registry
from slidekit.schema.design_system import DesignSystem
from slidekit.schema.loader import dump_schema, load_design


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _load_design(args) -> DesignSystem:
    """Load a DesignSystem from --design, or the defaults."""
    path = getattr(args, "design", None)
    if not path:
        return DesignSystem()
    path = Path(path)
    if not path.exists():
        _error(f"Design file not found: {path}")
    try:
        return load_design(path)
    except (yaml.YAMLError, ValueError) as exc:
        _error(f"Could not read design {path}: {exc}")


def _load_deck(args):
    path = Path(args.deck)
    if not path.exists():
        _error(f"Deck file not found: {path}")
    try:
        deck = load_deck(path)
    except (DeckFormatError, ValueError) as exc:
        _error(f"Could not read deck {path}: {exc}")
    _info(f"Deck: {path} ({len(deck)} slide(s))")
    return deck


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_layouts(args):
    """List registered layouts."""
    registry = default_registry()
    for layout in registry:
        print(f"{layout.layout_id:26s} {layout.name}")
        if args.verbose:
            print(f"    {layout.description}")


def cmd_inspect(args):
    """Show one layout's schema."""
    registry = default_registry()
    try:
        layout = registry.get_layout(args.layout)
    except LayoutNotFoundError as exc:
        _error(str(exc))

    if args.yaml:
        print(dump_schema(layout.schema), end="")
        return

    print(f"Layout:  {layout.layout_id} ({layout.name})")
    print(f"Fields:  {len(layout.schema.fields)}")
    print()
    for spec in layout.schema.fields:
        default = "" if not spec.has_default else " [default]"
        print(f"  {spec.name:16s} {spec.field_type.value}{default}")
        if args.verbose and spec.description:
            print(f"  {'':16s} {spec.description}")


def cmd_validate(args):
    """Validate deck data without rendering."""
    deck = _load_deck(args)
    validator = QAValidator()
    qa_result = validator.validate_deck(deck)
    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_generate(args):
    """Generate a PPTX presentation from a deck file."""
    deck = _load_deck(args)
    design = _load_design(args)

    _info("Building PPTX...")
    builder = PPTXBuilder(design=design)
    try:
        build = builder.render(deck)
    except LayoutNotFoundError as exc:
        _error(str(exc))
    except DeckValidationError as exc:
        _error(f"Invalid slide data: {exc}")
    pptx_bytes = build.pptx_bytes

    if not args.skip_qa:
        _info("Running QA validation...")
        qa_result = QAValidator(builder.registry).validate(pptx_bytes, deck)
        if qa_result.passed:
            _info(qa_result.summary())
        else:
            _warn(qa_result.summary())
            if args.verbose:
                print(qa_result.report(), file=sys.stderr)
            if not args.force:
                _error("QA validation failed. Use --force to write anyway, "
                       "or --skip-qa to skip validation.")
    else:
        _info("QA validation skipped (--skip-qa)")

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pptx_bytes)
    _info(f"Written: {output} ({len(pptx_bytes):,} bytes)")


def cmd_describe(args):
    """Dump every layout's schema as JSON for the generation pipeline."""
    print(json.dumps(default_registry().describe(), indent=2))


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="slidekit",
        description="Render schema-validated slide layouts to PowerPoint.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Library log level (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- layouts ----
    lay = subparsers.add_parser("layouts", help="List built-in layouts.")
    lay.add_argument("-v", "--verbose", action="store_true", default=False,
                     help="Show layout descriptions.")
    lay.set_defaults(func=cmd_layouts)

    # ---- inspect ----
    insp = subparsers.add_parser("inspect", help="Show a layout's schema.")
    insp.add_argument("--layout", required=True, help="Layout id.")
    insp.add_argument("--yaml", action="store_true", default=False,
                      help="Print the full schema as YAML.")
    insp.add_argument("-v", "--verbose", action="store_true", default=False,
                      help="Show field descriptions.")
    insp.set_defaults(func=cmd_inspect)

    # ---- describe ----
    desc = subparsers.add_parser(
        "describe", help="Dump all layout schemas as JSON.")
    desc.set_defaults(func=cmd_describe)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate", help="Validate deck data against layout schemas.")
    _add_deck_args(val)
    val.set_defaults(func=cmd_validate)

    # ---- generate ----
    gen = subparsers.add_parser(
        "generate", help="Generate a PPTX presentation from a deck file.")
    _add_deck_args(gen)
    gen.add_argument("-o", "--output", required=True,
                     help="Output PPTX file path.")
    gen.add_argument("--design", help="Design system YAML file.")
    gen.add_argument("--skip-qa", action="store_true", default=False,
                     help="Skip QA validation after generation.")
    gen.add_argument("--force", action="store_true", default=False,
                     help="Write output even if QA validation fails.")
    gen.add_argument("-v", "--verbose", action="store_true", default=False,
                     help="Show detailed output (full QA report on failure).")
    gen.set_defaults(func=cmd_generate)

    return parser


def _add_deck_args(parser):
    """Add the --deck argument to a subparser."""
    parser.add_argument(
        "--deck",
        required=True,
        help="Deck file (.json, .yaml or .yml) listing layouts and data.",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
