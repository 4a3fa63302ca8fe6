"""
Video reading functionality for the motion extraction tool.

This module provides a forward-only video source that decodes one frame at a
time, so memory use does not grow with the length of the video.
"""

from typing import Iterator, Optional
import logging
import os
from dataclasses import dataclass

import numpy as np
import cv2

from .exceptions import SourceUnavailableError


logger = logging.getLogger(__name__)


@dataclass
class VideoMetadata:
    """Metadata for an opened video"""
    fps: float
    width: int
    height: int
    num_frames: int
    duration: float  # seconds
    codec: str


# Type alias for Frame
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8, range: [0, 255]


def _decode_fourcc(fourcc: int) -> str:
    return "".join([chr((fourcc >> 8 * i) & 0xFF) for i in range(4)])


class VideoSource:
    """
    Sequential, forward-only reader over the frames of a video file.

    Frames are returned in RGB order. The source is iterable and can be used
    as a context manager:

        >>> with VideoSource("input.mp4") as source:
        ...     for frame in source:
        ...         ...
    """

    def __init__(self, path: str):
        """
        Open a video file for reading.

        Args:
            path: Path to video file

        Raises:
            SourceUnavailableError: If the file doesn't exist or can't be decoded
        """
        self.path = path

        if not os.path.exists(path):
            raise SourceUnavailableError(f"Could not open file {path}: file not found", path)

        self._cap = cv2.VideoCapture(path)

        if not self._cap.isOpened():
            self._cap.release()
            raise SourceUnavailableError(
                f"Could not open file {path}. Format may be unsupported.", path
            )

        fps = self._cap.get(cv2.CAP_PROP_FPS)
        width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        num_frames = max(int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT)), 0)
        codec = _decode_fourcc(int(self._cap.get(cv2.CAP_PROP_FOURCC)))

        # Validate metadata
        if fps <= 0:
            self._cap.release()
            raise SourceUnavailableError(f"Invalid FPS detected in {path}: {fps}", path)

        if width <= 0 or height <= 0:
            self._cap.release()
            raise SourceUnavailableError(
                f"Invalid resolution detected in {path}: {width}x{height}", path
            )

        self.metadata = VideoMetadata(
            fps=fps,
            width=width,
            height=height,
            num_frames=num_frames,
            duration=num_frames / fps,
            codec=codec,
        )
        self.frames_read = 0

        logger.info(
            f"Opened {path}: {width}x{height} @ {fps:.2f} fps, "
            f"{num_frames} frame(s), codec '{codec}'"
        )

    def read(self) -> Optional[Frame]:
        """
        Read the next frame.

        Returns:
            frame: RGB frame, or None once the stream is exhausted
        """
        if self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret:
            return None

        self.frames_read += 1
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def __iter__(self) -> Iterator[Frame]:
        while True:
            frame = self.read()
            if frame is None:
                return
            yield frame
            del frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug(f"Released {self.path} after {self.frames_read} frame(s)")

    def __enter__(self) -> "VideoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
