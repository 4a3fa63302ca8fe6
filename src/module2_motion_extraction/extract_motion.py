#!/usr/bin/env python3
"""
Motion Extraction Command-Line Tool

Compares every frame of a video with an earlier frame of the same video and
writes the result as a new video. Static content turns mid-gray, moving
content stands out.

Steps:
1. Parse arguments and load configuration
2. Open the input video and resolve the offset in frames
3. Create the output video with the input's size and frame rate
4. Run the motion extraction pipeline
"""

import argparse
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from module1_video_io import VideoSource, VideoSink, VideoIOError
from module2_motion_extraction.config import (
    PipelineConfig,
    check_offset_arguments,
    load_config,
    resolve_delay,
    validate_offset,
)
from module2_motion_extraction.exceptions import MotionExtractionError
from module2_motion_extraction.gamma import build_gamma_table
from module2_motion_extraction.pipeline import MotionExtractionPipeline


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(verbose: bool = False):
    """Configure logging for the command-line tool."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


# =============================================================================
# COMMAND-LINE INTERFACE
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='extract-motion',
        description='Extract the motion in a video by comparing each frame with an earlier one',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
NOTE: --frames and --seconds are mutually exclusive.
A small offset shows fast movements in the video. A large offset shows slow movements in the video.
If -f or -s is set to 0, the output video shows change from the start of the video.

Example:
  extract-motion input.mp4 output.mp4 -s 1
        """
    )

    parser.add_argument(
        'input_path',
        help='Path to input video file (MP4)'
    )

    parser.add_argument(
        'output_path',
        help='Path of output video file to save (MP4)'
    )

    parser.add_argument(
        '-f', '--frames',
        type=int,
        default=None,
        help='Number of frames to offset by'
    )

    parser.add_argument(
        '-s', '--seconds',
        type=float,
        default=None,
        help='Number of seconds to offset by'
    )

    parser.add_argument(
        '-o', '--overlay',
        action='store_true',
        help='Overlay the extracted motion over the original video'
    )

    parser.add_argument(
        '-c', '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (default: packaged default_config.yaml)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging and a progress bar'
    )

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def extract_motion(args: argparse.Namespace) -> int:
    """
    Run motion extraction for parsed command-line arguments.

    Returns:
        written: Number of frames written to the output video

    Raises:
        MotionExtractionError: On invalid configuration or offset
        VideoIOError: If the input can't be opened or the output can't be created
    """
    # Reject bad offset flags before reading the config or touching any video
    check_offset_arguments(args.frames, args.seconds)

    # load_config type-checks every value it returns
    config = load_config(args.config)
    gamma_table = build_gamma_table(config["post_processing"]["gamma"])

    with VideoSource(args.input_path) as source:
        metadata = source.metadata

        delay = resolve_delay(args.frames, args.seconds, metadata.fps)
        validate_offset(delay, metadata.num_frames, metadata.fps, args.seconds)

        pipeline_config = PipelineConfig.from_dict(config, delay=delay, overlay=args.overlay)
        pipeline = MotionExtractionPipeline(
            pipeline_config,
            gamma_table=gamma_table,
            frame_count=metadata.num_frames
        )

        with VideoSink(
            args.output_path,
            fps=metadata.fps,
            frame_size=(metadata.width, metadata.height),
            codec=config["output"]["codec"]
        ) as sink:
            with tqdm(
                total=metadata.num_frames,
                unit='frame',
                desc='Extracting motion',
                disable=not args.verbose
            ) as bar:
                written = pipeline.run(source, sink, progress=bar.update)

    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line tool."""
    args = parse_arguments(argv)

    setup_logging(verbose=args.verbose)

    logging.info(f"Input video: {args.input_path}")
    logging.info(f"Output video: {args.output_path}")

    try:
        written = extract_motion(args)
    except (MotionExtractionError, VideoIOError) as e:
        logging.error(f"Error: {e}")
        return 1

    logging.info(f"Done: {written} frame(s) written to {args.output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
