"""
CLI example to run the complete Lumina Worlds pipeline end-to-end.

Usage:
    python scripts/run_full_pipeline.py \
        --idea "floating cities above toxic clouds" \
        --world-type "Post-Apocalyptic" \
        --output world.yaml \
        --export-dir exports
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lumina_worlds import WorldAggregate, WorldOrchestrator, export_world  # noqa: E402
from lumina_worlds.common import ExportError, WorldGenerationError  # noqa: E402
from lumina_worlds.pipeline import ProgressUpdated  # noqa: E402
from lumina_worlds.pipeline.progress import SLOT_COUNTS  # noqa: E402

TEXT_STAGES = {
    "narrative:generating": "[1/5] Writing the world narrative...",
    "ideas:generating": "[2/5] Brainstorming game & book ideas...",
    "customization:generating": "[3/5] Suggesting customization options...",
    "characters:generating": "[4/5] Creating character concepts...",
    "regions:generating": "[5/5] Describing regions...",
}


class ProgressTracker:
    """
    Provides command-line progress updates for the Lumina Worlds pipeline.
    """

    def __init__(self) -> None:
        self._visual_bar: tqdm | None = None

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        if stage in TEXT_STAGES:
            self._write(TEXT_STAGES[stage])
            return

        match stage:
            case "characters:generated":
                self._write(f"      {payload.get('count', 0)} characters returned.")
            case "pipeline:failed":
                self._write(f"Generation failed: {payload.get('error')}")
                self.close()
            case "pipeline:complete":
                self._write("World generation complete.")
                self.close()

    def on_slot(self, event: ProgressUpdated) -> None:
        if event.state.loading:
            if self._visual_bar is None:
                self._visual_bar = tqdm(total=sum(SLOT_COUNTS.values()), desc="Visual slots", unit="slot")
            self._visual_bar.set_description(f"{event.slot_kind.title()} {event.slot_index + 1}")
        elif event.state.completed and self._visual_bar is not None:
            self._visual_bar.update(1)
            if event.state.failed:
                self._visual_bar.set_postfix_str("description fallback")

    def close(self) -> None:
        if self._visual_bar is not None:
            self._visual_bar.close()
            self._visual_bar = None

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a complete world with Lumina Worlds.")
    parser.add_argument("--idea", required=True, help="General idea for the world.")
    parser.add_argument(
        "--world-type",
        required=True,
        help="World category, e.g. 'Medieval Fantasy', 'Cyberpunk' or any custom label.",
    )
    parser.add_argument(
        "--no-visuals",
        dest="include_visuals",
        action="store_false",
        default=True,
        help="Skip concept, character and scenario image generation.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Optional YAML file to store the generated world.",
    )
    parser.add_argument(
        "--export-dir",
        default=None,
        help="Directory for the PDF (or text fallback) export.",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Gemini API key (default: GEMINI_API_KEY environment variable).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser.parse_args()


async def generate(args: argparse.Namespace, tracker: ProgressTracker) -> WorldAggregate:
    async with WorldOrchestrator(api_key=args.api_key) as orchestrator:
        unsubscribe = orchestrator.progress.subscribe(tracker.on_slot)
        try:
            return await orchestrator.build_world(
                args.idea,
                args.world_type,
                args.include_visuals,
                progress_callback=tracker,
            )
        finally:
            unsubscribe()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    tracker = ProgressTracker()
    try:
        world = asyncio.run(generate(args, tracker))
    except ValueError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except WorldGenerationError as exc:
        print(f"Failed to generate content: {exc}. Please try again.", file=sys.stderr)
        return 1
    finally:
        tracker.close()

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(world.to_yaml(), encoding="utf-8")
        print(f"Saved world to {output_path}")

    if args.export_dir:
        try:
            outcome = export_world(world, args.export_dir)
        except ExportError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        print(outcome.message)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
