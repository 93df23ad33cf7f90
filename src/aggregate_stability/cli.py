"""Command line entry point: score every sample folder of a parent directory.

Example:
    aggregate-stability D:/Data/AgStabData --preset slakes
    aggregate-stability ./samples --crop 0 2400 0 2400 --no-circle --overwrite abort
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional
from tqdm import tqdm
from .config import CropRect, StabilityConfig, GRAYSCALE_MODES, OVERWRITE_POLICIES, PRESETS, load_config, preset_config
from .errors import OutputConflictError
from .pipeline import BatchRunner
from .reporting import save_run_summary
from .utils.logger import setup_logger

logger = logging.getLogger(__name__)

def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Wet aggregate stability index from before/after submersion images.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        'parent_dir',
        nargs='?',
        type=str,
        help='Folder containing one subfolder per image pair (prompted for when omitted)'
    )

    parser.add_argument(
        '--preset',
        choices=sorted(PRESETS),
        help='Crop settings of a known camera rig'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='JSON file with configuration values'
    )

    crop = parser.add_mutually_exclusive_group()
    crop.add_argument(
        '--crop',
        type=int,
        nargs=4,
        metavar=('XMIN', 'XMAX', 'YMIN', 'YMAX'),
        help='Rectangle to keep, in pixels (max bounds excluded)'
    )
    crop.add_argument(
        '--no-crop',
        action='store_true',
        help='Use the whole image'
    )

    circle = parser.add_mutually_exclusive_group()
    circle.add_argument(
        '--circle-diameter',
        type=int,
        help='Diameter of the centred circular mask in pixels'
    )
    circle.add_argument(
        '--no-circle',
        action='store_true',
        help='Disable the circular mask'
    )

    parser.add_argument(
        '--grayscale',
        choices=GRAYSCALE_MODES,
        help='Grayscale reduction (default: luminance)'
    )

    parser.add_argument(
        '--overwrite',
        choices=OVERWRITE_POLICIES,
        help='What to do if the results file already exists (default: prompt)'
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        help='Number of sample folders to score in parallel (default: 1)'
    )

    parser.add_argument(
        '--save-masks',
        type=str,
        metavar='DIR',
        help='Save binarised masks as TIFF files into DIR'
    )

    parser.add_argument(
        '--sample-files',
        action='store_true',
        help='Also write a results CSV into every sample folder'
    )

    parser.add_argument(
        '--summary',
        action='store_true',
        help='Save a run summary text file next to the results'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug output'
    )

    return parser.parse_args(argv)

def build_config(args) -> StabilityConfig:
    """Combine preset, config file and command line flags (later wins)."""
    if args.config:
        config = load_config(args.config)
        if args.preset:
            logger.warning("--preset is ignored when --config is given")
    elif args.preset:
        config = preset_config(args.preset)
    else:
        config = StabilityConfig()

    overrides = {
        'parent_directory': Path(args.parent_dir) if args.parent_dir else None,
        'crop_rect': CropRect(*args.crop) if args.crop else None,
        'circle_diameter': args.circle_diameter,
        'grayscale': args.grayscale,
        'overwrite_policy': args.overwrite,
        'workers': args.workers,
        'mask_dir': Path(args.save_masks) if args.save_masks else None,
        'write_sample_files': True if args.sample_files else None,
    }
    config = config.with_overrides(**overrides)

    # with_overrides skips None, so clearing a value goes through the explicit flags
    if args.no_crop:
        config = replace(config, crop_rect=None)
    if args.no_circle:
        config = replace(config, circle_diameter=None)
    return config

def ask_parent_directory(prompt: Callable[[str], str] = input) -> Path:
    """Ask for the parent directory until a non-empty path is entered."""
    entered = ''
    while not entered:
        entered = prompt(
            "Enter absolute path of the folder containing image-pair subfolders "
            "(example: C:/Users/exampleUser/Data/AgStabData): "
        ).strip()
    return Path(entered)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logger(__name__, logging.DEBUG if args.verbose else logging.INFO)

    config = build_config(args)
    if config.parent_directory is None:
        config = config.with_overrides(parent_directory=ask_parent_directory())

    logger.info(f"Processing directory: {config.parent_directory}")
    logger.info(f"Crop: {config.crop_rect}, circle diameter: {config.circle_diameter}")

    runner = BatchRunner(config)
    try:
        n_folders = len(runner.find_sample_folders(config.parent_directory, exclude=config.mask_dir))
        with tqdm(total=n_folders, desc="Scoring samples", unit="sample") as pbar:
            batch_result = runner.run(pbar=pbar)
    except OutputConflictError as e:
        logger.error(str(e))
        return 1
    except NotADirectoryError as e:
        logger.error(f"Not a directory: {e}")
        return 1

    if args.summary:
        summary_path = save_run_summary(batch_result, config.parent_directory)
        logger.info(f"Run summary saved to {summary_path}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
