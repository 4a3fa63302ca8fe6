"""
Module 1: Video I/O

This module provides streaming video input/output for the motion extraction
tool. Frames are read and written one at a time, in RGB order.
"""

import numpy as np

from .video_loader import VideoSource, VideoMetadata
from .video_writer import VideoSink, codec_to_fourcc
from .exceptions import VideoIOError, SourceUnavailableError, SinkUnavailableError


# Type alias for Frame
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8, range: [0, 255]


# Export public interface
__all__ = [
    'VideoSource',
    'VideoSink',
    'VideoMetadata',
    'VideoIOError',
    'SourceUnavailableError',
    'SinkUnavailableError',
    'codec_to_fourcc',
    'Frame'
]
