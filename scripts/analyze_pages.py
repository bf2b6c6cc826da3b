#!/usr/bin/env python3
"""
Floorplan Page Analysis CLI

Detect rooms on rendered floorplan page images, using the hosted
segmentation model when a Hugging Face token is configured and the
deterministic mock detector otherwise, and output results as JSON.

Usage:
    python scripts/analyze_pages.py --image page-1.png --output rooms.json
    python scripts/analyze_pages.py --image-dir ./pages/ --output results.json
    python scripts/analyze_pages.py --image page-1.png --mock --visualize

Examples:
    # Commercial plan with extra room types
    python scripts/analyze_pages.py \\
        --image-dir ./pages/ \\
        --classification commercial \\
        --custom-types custom_types.json \\
        --output rooms.json

    # Mock detection with overlay images
    python scripts/analyze_pages.py \\
        --image-dir ./pages/ \\
        --mock \\
        --output rooms.json \\
        --visualize \\
        --vis-dir ./overlays/
"""

import argparse
import base64
import io
import json
import logging
import sys
from pathlib import Path

import numpy as np
from dotenv import load_dotenv
from PIL import Image

log = logging.getLogger("analyze_pages")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Detect rooms on floorplan page images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Input options (mutually exclusive)
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        "--image", "-i",
        type=str,
        help="Path to a single page image"
    )
    input_group.add_argument(
        "--image-dir", "-d",
        type=str,
        help="Directory containing page images"
    )

    # Analysis options
    parser.add_argument(
        "--classification",
        type=str,
        default="residential",
        choices=["residential", "commercial"],
        help="Construction type (default: residential)"
    )
    parser.add_argument(
        "--custom-types",
        type=str,
        default=None,
        help='JSON file with custom room types: [{"label": ..., "color": ...}]'
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Skip the hosted model and use mock detections"
    )

    # Output options
    parser.add_argument(
        "--output", "-o",
        type=str,
        required=True,
        help="Path to output JSON file"
    )
    parser.add_argument(
        "--visualize",
        action="store_true",
        help="Generate overlay images"
    )
    parser.add_argument(
        "--vis-dir",
        type=str,
        default=None,
        help="Directory for overlay outputs (default: next to output)"
    )

    return parser.parse_args(argv)


def get_image_files(image_dir: str) -> list:
    """Get all PNG and JPEG files from a directory."""
    extensions = {'.png', '.jpg', '.jpeg'}
    image_dir = Path(image_dir)

    files = [p for p in image_dir.iterdir() if p.suffix.lower() in extensions]
    return sorted(files)


def to_data_url(image_path: Path) -> str:
    """Re-encode an image as a PNG data URL."""
    with Image.open(image_path) as image:
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    load_dotenv()

    from floorplan_sandbox.config import AnalysisConfig
    from floorplan_sandbox.inference import FloorplanAnalyzer
    from floorplan_sandbox.models import PageInput
    from floorplan_sandbox.postprocessing import render_room_overlay, save_overlay_png
    from floorplan_sandbox.room_types import sanitize_custom_types

    config = AnalysisConfig.from_env()
    if args.mock:
        analyzer = FloorplanAnalyzer(config=config)
    else:
        analyzer = FloorplanAnalyzer.from_config(config)

    custom_types = []
    if args.custom_types:
        with open(args.custom_types, 'r') as f:
            custom_types = sanitize_custom_types(json.load(f))

    # Get input images
    if args.image:
        image_paths = [Path(args.image)]
    else:
        image_paths = get_image_files(args.image_dir)
        if not image_paths:
            log.error("No images found in %s", args.image_dir)
            return 1
        log.info("Found %d images", len(image_paths))

    pages = [
        PageInput(id=f"page-{n}", index=n, thumbnail=to_data_url(path))
        for n, path in enumerate(image_paths, start=1)
    ]

    result = analyzer.analyze_pages(pages, args.classification, custom_types)

    log.info("Pages processed: %d", len(pages))
    log.info("Total rooms: %d%s", result.total_rooms, " (mock)" if result.fallback else "")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    analyzer.save_json(result, output_path)

    if args.visualize:
        vis_dir = Path(args.vis_dir) if args.vis_dir else output_path.parent / "overlays"
        vis_dir.mkdir(parents=True, exist_ok=True)

        for page, image_path in zip(pages, image_paths):
            with Image.open(image_path) as image:
                page_image = np.array(image.convert("RGB"))
            overlay = render_room_overlay(page_image, result.rooms[page.id])

            vis_path = vis_dir / f"{image_path.stem}-analysis.png"
            save_overlay_png(overlay, vis_path)
            log.info("Saved overlay: %s", vis_path.name)

    return 0


if __name__ == "__main__":
    sys.exit(main())
