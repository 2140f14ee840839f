from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .config import PipelineConfig, available_presets, load_pipeline, load_preset
from .danger import calculate_danger_levels
from .errors import ConfigurationError
from .logging_config import configure_logging
from .pipeline import GenerationPipeline, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "bsp_standard"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="pitgen",
        description="Generate a roguelike dungeon and print a JSON summary.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        default=None,
        help=f"Packaged pipeline preset to run (default: {DEFAULT_PRESET}).",
    )
    source.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to a pipeline YAML file.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed override; -1 for random.")
    parser.add_argument("--width", type=int, default=None, help="Grid width override.")
    parser.add_argument("--height", type=int, default=None, help="Grid height override.")
    parser.add_argument("--ascii", action="store_true", help="Also print the map as ASCII.")
    parser.add_argument("--list-presets", action="store_true", help="List packaged presets and exit.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    return parser.parse_args(argv)


def summarize(result: GenerationResult) -> Dict[str, Any]:
    md = result.metadata
    data: Dict[str, Any] = {
        "seed": result.seed,
        "width": result.width,
        "height": result.height,
        "base_generator": result.base_generator,
        "passes": list(result.passes_executed),
        "floor_tiles": result.count_floor_tiles(),
        "walkable_percent": round(result.walkable_percent(), 2),
        "regions": len(md.regions),
        "alcoves": len(md.alcoves),
        "passages": len(md.passages),
        "chokepoints": len(md.chokepoints),
        "entrance": list(md.entrance) if md.entrance else None,
        "exit": list(md.exit) if md.exit else None,
        "fully_connected": md.region_graph.is_fully_connected() if md.region_graph else None,
        "diagnostics": list(result.diagnostics),
    }
    if md.entrance is not None and md.regions:
        data["danger"] = {str(k): v for k, v in calculate_danger_levels(md).items()}
    return data


def build_config(args) -> PipelineConfig:
    if args.config_path is not None:
        config = load_pipeline(args.config_path)
    else:
        config = load_preset(args.preset or DEFAULT_PRESET)
    return config.with_overrides(seed=args.seed, width=args.width, height=args.height)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.WARNING)

    if args.list_presets:
        print("\n".join(available_presets()))
        return 0

    try:
        config = build_config(args)
        pipeline = GenerationPipeline.from_config(config)
        logger.debug("%s", pipeline.summary())
        result = pipeline.execute()
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    # Print JSON summary so it can be diffed across runs
    print(json.dumps(summarize(result), indent=2, sort_keys=True))
    if args.ascii:
        print(result.to_ascii())
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
