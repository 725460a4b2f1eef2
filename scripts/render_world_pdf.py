"""
Render a saved Lumina Worlds YAML snapshot into a printable PDF.

Usage:
    python scripts/render_world_pdf.py \
        --package world.yaml \
        --output-dir exports
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on the Python path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lumina_worlds import WorldAggregate, WorldPDFBuilder, export_world  # noqa: E402
from lumina_worlds.common import ExportError  # noqa: E402
from lumina_worlds.pdf_generation import PAGE_SIZES  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a Lumina Worlds YAML snapshot into a PDF (or text fallback)."
    )
    parser.add_argument(
        "--package",
        required=True,
        help="Path to the world YAML (output of run_full_pipeline.py --output).",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory the export is written to (default: current directory).",
    )
    parser.add_argument(
        "--page-size",
        choices=sorted(PAGE_SIZES.keys()),
        default="a4",
        help="Page size to render (default: a4).",
    )
    parser.add_argument(
        "--margin-mm",
        type=float,
        default=20.0,
        help="Page margin in millimetres (default: 20).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    world = WorldAggregate.from_yaml(args.package)
    builder = WorldPDFBuilder(page_size=PAGE_SIZES[args.page_size], margin_mm=args.margin_mm)

    try:
        outcome = export_world(world, args.output_dir, pdf_builder=builder)
    except ExportError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(outcome.message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
