#!/usr/bin/env python3
"""Apply a slide background to a page document or to slides of a PPTX.

The background can be any supported generation (layered, legacy union,
legacy solid); it is normalized before being applied.  With media present,
the background image is added as a locked picture pinned behind everything
else and cropped/positioned per its sizing and position.

Usage:
    # JSON page document:
    python scripts/apply_background.py page.json -b background.json -o page_out.json

    # Every slide of a deck, inline background:
    python scripts/apply_background.py deck.pptx \
        -b '{"color": {"type": "gradient", "gradient": {"from": "#0E8155", "to": "#F1FACF", "direction": "bottom"}}}' \
        -o deck_out.pptx

    # One slide, image background, custom engine config:
    python scripts/apply_background.py deck.pptx --slide 2 \
        -b '{"type": "media", "mediaUrl": "assets/hero.jpg", "sizing": "fill", "position": "top"}' \
        --config configs/background.yaml -o deck_out.pptx

    # Re-sync pages from their stored background (or infer it):
    python scripts/apply_background.py deck.pptx --resync -o deck_out.pptx
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pptx import Presentation

from src.background_engine import BackgroundSynchronizer, normalize
from src.host.memory_page import MemoryPage
from src.pptx_engine.background_host import PptxSlidePage
from src.schemas.engine_config import EngineConfig
from src.utils.file_utils import load_background_arg

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _apply(sync: BackgroundSynchronizer, page, background, resync: bool) -> None:
    if resync:
        sync.sync_page(page)
    else:
        sync.apply(page, background)


def main():
    parser = argparse.ArgumentParser(description="Apply a slide background")
    parser.add_argument("input", type=Path, help="Page document (.json) or presentation (.pptx)")
    parser.add_argument("-b", "--background", default=None,
                        help="Background as a JSON/YAML file path, inline JSON, or a hex color")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output path (default: overwrite input)")
    parser.add_argument("--slide", type=int, default=None,
                        help="0-based slide index for .pptx input (default: all slides)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Optional engine config YAML")
    parser.add_argument("--resync", action="store_true",
                        help="Re-apply each page's stored background instead of -b")
    args = parser.parse_args()

    if not args.input.exists():
        print(f"Error: Input not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    if args.background is None and not args.resync:
        print("Error: Provide --background or --resync", file=sys.stderr)
        sys.exit(1)

    try:
        config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
        raw = load_background_arg(args.background) if args.background is not None else None
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    background = normalize(raw, config) if raw is not None else None
    sync = BackgroundSynchronizer(config=config)
    output = args.output or args.input
    output.parent.mkdir(parents=True, exist_ok=True)

    suffix = args.input.suffix.lower()
    if suffix == ".pptx":
        prs = Presentation(str(args.input))
        indices = [args.slide] if args.slide is not None else range(len(prs.slides))
        try:
            for index in indices:
                page = PptxSlidePage.from_presentation(prs, index, config)
                _apply(sync, page, background, args.resync)
                logger.info(f"Applied background to slide {index + 1}")
        except IndexError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        prs.save(str(output))
    elif suffix == ".json":
        page = MemoryPage.load(args.input)
        _apply(sync, page, background, args.resync)
        page.save(output)
    else:
        print(f"Error: Unsupported input format '{suffix}'. Supported: .json, .pptx", file=sys.stderr)
        sys.exit(1)

    print(f"Background applied: {output}")
    if background is not None:
        print(f"Color layer: {background.color.type}")
        print(f"Media layer: {background.media.media_url if background.media else 'none'}")


if __name__ == "__main__":
    main()
