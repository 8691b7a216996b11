"""
Command line interface: remove red eye from an image file
"""

import argparse
import logging
from pathlib import Path

from . import __version__
from .config import load_config
from .core.image_processor import ImageProcessor
from .core.red_eye_tool import RedEyeTool
from .errors import RedEyeError
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="redeye",
        description="Detect and remove red eye from a photograph.",
    )
    parser.add_argument("input", help="Image to correct")
    parser.add_argument("output", help="Where to write the corrected image")
    parser.add_argument("--config", help="JSON file overriding the pipeline settings")
    parser.add_argument("--debug-dir", help="Write the intermediate masks into this directory")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", help="Also log (DEBUG level) to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        config = load_config(args.config)
        image = ImageProcessor.load_image(args.input)
        logger.info(f"Loaded {args.input} ({image.shape[1]}x{image.shape[0]})")

        debug_images = {} if args.debug_dir else None
        result = RedEyeTool(config).process_image(image, debug_images)

        ImageProcessor.save_image(args.output, result)
        logger.info(f"Saved corrected image to {args.output}")

        if debug_images:
            debug_dir = Path(args.debug_dir)
            debug_dir.mkdir(parents=True, exist_ok=True)
            for name, debug_image in debug_images.items():
                ImageProcessor.save_image(debug_dir / f"{name}.png", debug_image)
            logger.info(f"Wrote {len(debug_images)} debug images to {debug_dir}")

    except RedEyeError as e:
        logger.error(f"Red-eye removal failed ({e.kind.value}): {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    return 0
