"""
Module 2: Motion Extraction

Temporal differencing of video frames. Each frame is blended with the
negative of the frame `delay` steps earlier, so static content cancels out
to gray and moving content remains visible.

Public Interface:
    - MotionExtractionPipeline: Buffers, pairs and processes frames
    - PipelineConfig: Immutable run settings
    - compare_frames: Invert-and-blend of two frames
    - build_gamma_table / apply_gamma: Brightening lookup table
    - PostProcessMode / PostProcessor / post_process: Gamma or overlay output

Example usage:
    >>> from module2_motion_extraction import MotionExtractionPipeline, PipelineConfig
    >>> pipeline = MotionExtractionPipeline(PipelineConfig(delay=3, overlay=True))
    >>> outputs = list(pipeline.process(frames))
"""

from .comparator import compare_frames
from .config import PipelineConfig, load_config, validate_config, resolve_delay, validate_offset
from .exceptions import MotionExtractionError, InvalidConfigurationError, InvalidOffsetError
from .gamma import DEFAULT_GAMMA, build_gamma_table, apply_gamma
from .pipeline import MotionExtractionPipeline
from .post_processing import PostProcessMode, PostProcessor, post_process, overlay_motion


__all__ = [
    'MotionExtractionPipeline',
    'PipelineConfig',
    'load_config',
    'validate_config',
    'resolve_delay',
    'validate_offset',
    'compare_frames',
    'DEFAULT_GAMMA',
    'build_gamma_table',
    'apply_gamma',
    'PostProcessMode',
    'PostProcessor',
    'post_process',
    'overlay_motion',
    'MotionExtractionError',
    'InvalidConfigurationError',
    'InvalidOffsetError',
]

__version__ = "1.0.0"
