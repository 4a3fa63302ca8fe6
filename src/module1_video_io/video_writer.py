"""
Video writing functionality for the motion extraction tool.

This module provides a forward-only video sink with a fixed, pre-declared
frame size and frame rate.
"""

from typing import Tuple
import logging
import os

import numpy as np
import cv2

from .exceptions import VideoIOError, SinkUnavailableError


logger = logging.getLogger(__name__)


# Type alias for Frame
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8, range: [0, 255]


# Map codec string to fourcc
# OpenCV uses VideoWriter with fourcc codes
CODEC_MAP = {
    "libx264": "mp4v",
    "libx265": "mp4v",
    "h264": "H264",
    "h265": "HEVC",
    "avc1": "avc1",
    "mp4v": "mp4v",
    "mpeg4": "mp4v",
    "mjpg": "MJPG",
    "xvid": "XVID",
}


def codec_to_fourcc(codec: str) -> int:
    """
    Resolve a codec name to an OpenCV fourcc code.

    Unknown names fall back to 'mp4v'.
    """
    fourcc_str = CODEC_MAP.get(codec.lower(), "mp4v")
    return cv2.VideoWriter_fourcc(*fourcc_str)


class VideoSink:
    """
    Sequential, forward-only writer of RGB frames.

    Every frame written must match the (width, height) declared when the sink
    was opened.
    """

    def __init__(
        self,
        path: str,
        fps: float,
        frame_size: Tuple[int, int],
        codec: str = "mp4v"
    ):
        """
        Create the output video file.

        Args:
            path: Output video path
            fps: Frame rate
            frame_size: Output (width, height)
            codec: Video codec

        Raises:
            ValueError: If fps or frame size are invalid
            SinkUnavailableError: If the writer can't be created
        """
        width, height = frame_size

        if fps <= 0:
            raise ValueError(f"Invalid FPS: {fps}. Must be positive.")

        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid frame size: {width}x{height}")

        self.path = path
        self.fps = fps
        self.width = width
        self.height = height
        self.frames_written = 0

        # Create output directory if it doesn't exist
        output_dir = os.path.dirname(path)
        if output_dir and not os.path.exists(output_dir):
            try:
                os.makedirs(output_dir, exist_ok=True)
            except OSError as e:
                raise SinkUnavailableError(
                    f"Could not create the output video file {path}: {e}", path
                ) from e

        self._writer = cv2.VideoWriter(path, codec_to_fourcc(codec), fps, (width, height))

        if not self._writer.isOpened():
            self._writer.release()
            self._writer = None
            raise SinkUnavailableError(f"Could not create the output video file {path}", path)

        logger.info(f"Writing {path}: {width}x{height} @ {fps:.2f} fps, codec '{codec}'")

    def write(self, frame: Frame) -> None:
        """
        Write one RGB frame.

        Raises:
            VideoIOError: If the sink has already been released
            ValueError: If the frame doesn't match the declared size or dtype
        """
        if self._writer is None:
            raise VideoIOError(f"Cannot write to {self.path}: sink already released")

        if frame.shape != (self.height, self.width, 3):
            raise ValueError(
                f"Frame shape mismatch: {frame.shape}. "
                f"Expected {(self.height, self.width, 3)}."
            )

        if frame.dtype != np.uint8:
            raise ValueError(f"Invalid frame dtype: {frame.dtype}. Expected uint8.")

        # Convert RGB to BGR for OpenCV
        self._writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
        self.frames_written += 1

    def release(self) -> None:
        if self._writer is not None:
            self._writer.release()
            self._writer = None
            logger.info(f"Closed {self.path} after {self.frames_written} frame(s)")

    def __enter__(self) -> "VideoSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
