"""
Motion Extraction Pipeline

Pairs each frame of a video with the frame `delay` steps earlier (or with the
very first frame when delay is 0), compares the pair and post-processes the
result.

Pipeline:
    Input frames
    → Lookback buffer (delay frames deep)
    → Frame comparison (invert and blend)
    → Post-processing (gamma or overlay)
    → Output sink

The buffer never holds more than `delay` frames. Each steady-state step writes
its result into the reference it pops, so at most delay + 2 frames (buffer,
current frame, output) are resident at any time regardless of the length of
the video. With delay 0 the anchor frame takes the place of the buffer. The last
`delay` input frames have no later frame to pair with and produce no output.
"""

import logging
from collections import deque
from typing import Iterable, Iterator, Optional

import numpy as np

from .comparator import compare_frames
from .config import PipelineConfig, validate_offset
from .gamma import build_gamma_table
from .post_processing import PostProcessor

# Type aliases
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8


logger = logging.getLogger(__name__)

FILLING = "filling"
STEADY = "steady"


class MotionExtractionPipeline:
    """
    Sequential temporal-differencing pipeline.

    Example:
        >>> pipeline = MotionExtractionPipeline(PipelineConfig(delay=3))
        >>> with VideoSource("in.mp4") as source, VideoSink(...) as sink:
        ...     written = pipeline.run(source, sink)
    """

    def __init__(
        self,
        config: PipelineConfig,
        gamma_table: Optional[np.ndarray] = None,
        frame_count: Optional[int] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: Run configuration (delay, overlay mode, tunables)
            gamma_table: Precomputed lookup table. Built from config.gamma
                         when None.
            frame_count: Total frames in the source, if known

        Raises:
            InvalidOffsetError: If frame_count is known and delay exceeds it
        """
        if frame_count is not None:
            validate_offset(config.delay, frame_count)

        if gamma_table is None:
            gamma_table = build_gamma_table(config.gamma)

        self.config = config
        self.delay = config.delay
        self.post_processor = PostProcessor(
            mode=config.mode,
            gamma_table=gamma_table,
            threshold=config.threshold,
            blur_kernel=config.blur_kernel
        )

        self._buffer = deque()
        self._anchor = None

    @property
    def buffered(self) -> int:
        """Number of frames currently held in the lookback buffer."""
        return len(self._buffer)

    @property
    def state(self) -> str:
        if self.delay > 0 and len(self._buffer) < self.delay:
            return FILLING
        return STEADY

    def _reset(self) -> None:
        self._buffer.clear()
        self._anchor = None

    def _step(self, frame: Frame) -> Optional[Frame]:
        """
        Advance the pipeline by one input frame.

        Returns the post-processed motion frame, or None while filling. In
        steady state the popped reference is overwritten with the result, so
        the only new full frame is the buffered copy of frame, made after the
        reference has left the buffer.
        """
        if self.delay == 0:
            if self._anchor is None:
                self._anchor = frame.copy()
            motion = compare_frames(frame, self._anchor)
            return self.post_processor(motion, frame, dst=motion)

        if len(self._buffer) < self.delay:
            self._buffer.append(frame.copy())
            return None

        output = self._buffer.popleft()
        compare_frames(frame, output, dst=output)
        self.post_processor(output, frame, dst=output)
        self._buffer.append(frame.copy())
        return output

    def process(self, frames: Iterable[Frame]) -> Iterator[Frame]:
        """
        Lazily transform a sequence of frames into motion frames.

        Args:
            frames: Frames of a single video, all the same shape

        Yields:
            Post-processed motion frames, one per input frame once the
            buffer is full
        """
        self._reset()
        frames = iter(frames)

        try:
            while True:
                frame = next(frames, None)
                if frame is None:
                    break

                output = self._step(frame)
                # Nothing from this step may outlive it while the source
                # produces the next frame.
                del frame
                if output is not None:
                    yield output
                    del output
        finally:
            if self._buffer:
                logger.debug(f"Dropping {len(self._buffer)} trailing buffered frame(s)")
            self._reset()

    def run(self, source: Iterable[Frame], sink, progress=None) -> int:
        """
        Run the pipeline from a source to a sink.

        Args:
            source: Iterable of frames (e.g. a VideoSource)
            sink: Object with a write(frame) method (e.g. a VideoSink)
            progress: Optional callable invoked once per input frame

        Returns:
            written: Number of frames written to the sink
        """
        logger.info(
            f"Extracting motion: delay={self.delay} frame(s), "
            f"mode={self.post_processor.mode.value}"
        )

        frames = source
        if progress is not None:
            frames = _tap(source, progress)

        written = 0
        for output in self.process(frames):
            sink.write(output)
            written += 1
            del output

        logger.info(f"Wrote {written} frame(s)")
        return written


def _tap(frames: Iterable[Frame], callback) -> Iterator[Frame]:
    for frame in frames:
        callback()
        yield frame
        del frame
