#!/usr/bin/env python3
"""
CLI interface for the document scanner.

Usage:
    python -m document_scanner -i photo.jpg
    python -m document_scanner -i photo.jpg -o scan.png
    python -m document_scanner -i photo.jpg --detect-only
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2

from .config import ScannerConfig
from .errors import ScannerError
from .imaging import load_image
from .scanner import DocumentScanner

CORNER_NAMES = ["Top-left", "Top-right", "Bottom-right", "Bottom-left"]


def parse_point(value: str):
    try:
        x, y = value.split(',')
        return float(x), float(y)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected x,y but got {value!r}")


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Detect a document in a photo and flatten it',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Detect and rectify (creates photo_scanned.png next to the input)
  python -m document_scanner -i photo.jpg

  # Rectify with known corners, skipping detection
  python -m document_scanner -i photo.jpg --corners 40,60 980,50 1000,1400 20,1380

Detection order:
  contour -> hough lines -> contour with looser edges -> default rectangle
        """
    )

    parser.add_argument('-i', '--input', required=True, help='Input image')
    parser.add_argument('-o', '--output', help='Output file (default: <input>_scanned.png)')
    parser.add_argument(
        '--corners',
        nargs=4,
        type=parse_point,
        metavar='X,Y',
        help='Use these corners instead of detecting them'
    )
    parser.add_argument('--detect-only', action='store_true', help='Print corners, do not write output')
    parser.add_argument('--env', action='store_true', help='Read DOCSCAN_* settings from environment / .env')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main CLI function"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"❌ Error: Input file not found: {input_path}")
        return 1

    try:
        config = ScannerConfig.from_env() if args.env else ScannerConfig()
        image = load_image(input_path)
    except ScannerError as e:
        print(f"❌ Error: {e}")
        return 1

    scanner = DocumentScanner(config)
    print(f"📄 Processing: {input_path.name} ({image.shape[1]}x{image.shape[0]} px)")

    if args.corners:
        corners = args.corners
    else:
        result = scanner.detect(image)
        corners = result.corners
        print(f"🔍 Strategy: {result.strategy.value}")
        for name, corner in zip(CORNER_NAMES, corners):
            print(f"  {name}: ({corner.x:.1f}, {corner.y:.1f})")

    if args.detect_only:
        return 0

    warped = scanner.rectify(image, corners)

    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}_scanned.png")
    if not cv2.imwrite(str(output_path), warped):
        print(f"❌ Error: Failed to write {output_path}")
        return 1

    print(f"✅ Done: {output_path} ({warped.shape[1]}x{warped.shape[0]} px)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
