#!/usr/bin/env python3
"""
run_trifind

Command-line tool for finding triangles in images by template matching.
Templates are edge-detected and correlated against every input image with
zero-mean normalized cross-correlation; overlapping hits are merged with
non-maximum suppression.

Usage:
    run_trifind --templates TEMPLATE_DIR --input IMAGE [IMAGE ...] [OPTIONS]

Required Arguments:
    --input              One or more input image files

Optional Arguments:
    --templates          Directory with template images (.png, .jpg, .jpeg)
    --config             YAML settings file (templates_dir, scale, stride, threshold)
    --output_json        Path to output JSON file with the detections

Detection Configuration:
    --scale              Resize factor for images and templates (default: 0.5)
    --stride             Step in pixels between probed positions (default: 2)
    --threshold          Correlation score a match must exceed (default: 0.75)

Logging and Debug:
    --verbose            Enable debug logging
    --no-log-file        Do not write the rotating log file
"""

import argparse
import json
import logging
import sys
from typing import Dict, List

import cv2
import numpy as np

from trifind.trifindlib import (
    Constants,
    CorrelationMatcher,
    FinderConfig,
    TemplateBank,
    TriangleFinder,
    __version__,
)
from trifind.trifindlib.logger_config import setup_logger

logger = logging.getLogger(__name__)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Find triangles in images by edge-based template matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Defaults (scale 0.5, stride 2, threshold 0.75)
  python run_trifind.py --templates templates/ --input sonar.png

  # Several images, results written to JSON
  python run_trifind.py --templates templates/ --input a.png b.png --output_json out.json

  # Settings from a YAML file, threshold overridden on the command line
  python run_trifind.py --config finder.yaml --input sonar.png --threshold 0.8
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"trifind v{__version__}"
    )

    required = parser.add_argument_group("Required Arguments")
    required.add_argument(
        "--input", required=True, nargs="+", help="Path to one or more input images"
    )

    optional = parser.add_argument_group("Optional Arguments")
    optional.add_argument("--templates", help="Directory containing template images")
    optional.add_argument("--config", help="Path to YAML settings file")
    optional.add_argument("--output_json", help="Path to output JSON file")

    detection = parser.add_argument_group("Detection Configuration")
    detection.add_argument(
        "--scale",
        type=float,
        default=None,
        help="Resize factor for images and templates (default: 0.5)",
    )
    detection.add_argument(
        "--stride",
        type=int,
        default=None,
        help="Step in pixels between probed positions (default: 2)",
    )
    detection.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Correlation score a match must exceed (default: 0.75)",
    )

    debug = parser.add_argument_group("Logging and Debug")
    debug.add_argument("--verbose", action="store_true", help="Enable debug logging")
    debug.add_argument(
        "--no-log-file",
        dest="no_log_file",
        action="store_true",
        help="Do not write the rotating log file",
    )

    return parser.parse_args(argv)


def process_images(finder: TriangleFinder, config: FinderConfig) -> List[Dict]:
    """Run detection on every input image.

    Args:
        finder: Configured triangle finder
        config: Application configuration

    Returns:
        One result entry per image
    """
    results = []
    for image_path in config.input_paths:
        detections = finder.detect_file(image_path)
        logger.info(f"{image_path}: {len(detections)} triangles")
        for i, det in enumerate(detections):
            logger.info(f"  Detection {i}: box={det.bbox}, score={CorrelationMatcher.clamp_score(det.score):.3f}")

        results.append({
            "image": image_path,
            "annotator": Constants.ANNOTATOR_NAME,
            "detections": [det.to_dict() for det in detections],
        })
    return results


def save_results(results: List[Dict], output_path: str) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2)
    logger.info(f"Results written to {output_path}")


def main(argv=None):
    """Main function to build the template bank and process every image."""
    try:
        args = parse_arguments(argv)
        setup_logger(verbose=args.verbose, log_to_file=not args.no_log_file)

        logger.info(f"trifind v{__version__} starting")
        logger.info(f"Library versions: OpenCV {cv2.__version__}, NumPy {np.__version__}")

        config = FinderConfig(args)
        params = config.detection_params
        logger.info(
            f"Detection parameters: scale={params.scale}, stride={params.stride}, "
            f"threshold={params.threshold}"
        )

        bank = TemplateBank.from_directory(config.templates_dir, params.scale)
        finder = TriangleFinder(bank, params)

        results = process_images(finder, config)

        if config.output_json_path:
            save_results(results, config.output_json_path)

        logger.info("Triangle detection completed successfully")

    except KeyboardInterrupt:
        logger.info("Processing interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
