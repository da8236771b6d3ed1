#!/usr/bin/env python3
"""Render a slide background to a string for inspection or export.

Usage:
    # Normalized canonical JSON:
    python scripts/render_background.py -b '{"type": "gradient", "gradient": {"from": "#f00"}}' --format canonical

    # Value written to a page's native background field:
    python scripts/render_background.py -b background.json --format native --size 1080x1920

    # Standalone SVG for the color layer, saved to a file:
    python scripts/render_background.py -b background.yaml --format color-svg -o color.svg

    # Flattened data URI (gradient or media) for legacy consumers:
    python scripts/render_background.py -b background.json --format data-uri
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.background_engine import (
    background_data_uri,
    native_background,
    normalize,
    render_color_svg,
    render_media,
)
from src.schemas.engine_config import EngineConfig
from src.utils.file_utils import load_background_arg

FORMATS = ("canonical", "native", "color-svg", "media-svg", "data-uri")


def parse_size(value: str | None) -> tuple[float, float] | None:
    if not value:
        return None
    try:
        w, h = value.lower().split("x", 1)
        return float(w), float(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Size must look like 1080x1920, got '{value}'")


def main():
    parser = argparse.ArgumentParser(description="Render a slide background")
    parser.add_argument("-b", "--background", required=True,
                        help="Background as a JSON/YAML file path, inline JSON, or a hex color")
    parser.add_argument("--format", choices=FORMATS, default="canonical")
    parser.add_argument("--size", type=parse_size, default=None,
                        help="Page size in px as WIDTHxHEIGHT")
    parser.add_argument("--config", type=Path, default=None, help="Optional engine config YAML")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Write to this file instead of stdout")
    args = parser.parse_args()

    try:
        config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
        bg = normalize(load_background_arg(args.background), config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.format == "canonical":
        result = json.dumps(bg.to_dict(), indent=2)
    elif args.format == "native":
        result = native_background(bg.color, args.size, config)
    elif args.format == "color-svg":
        result = render_color_svg(bg.color, args.size, config)
    elif args.format == "media-svg":
        if bg.media is None:
            print("Error: Background has no media layer", file=sys.stderr)
            sys.exit(1)
        result = render_media(bg.media, args.size, config)
    else:
        result = background_data_uri(bg, args.size, config)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(result, encoding="utf-8")
        print(f"Wrote {args.format} output: {args.output}")
    else:
        print(result)


if __name__ == "__main__":
    main()
