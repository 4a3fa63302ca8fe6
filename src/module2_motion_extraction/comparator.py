"""
Frame comparison.

Blends a frame with the negative of an earlier frame. Where the two frames
agree the result is mid-gray; where they differ it drifts towards bright or
dark, which makes moving content stand out.
"""

from typing import Optional

import numpy as np
import cv2


# Type alias for Frame
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8, range: [0, 255]


def compare_frames(current: Frame, reference: Frame, dst: Optional[Frame] = None) -> Frame:
    """
    Compute the motion frame for a current/reference pair.

    output = 0.5 * current + 0.5 * (255 - reference)

    Args:
        current: Current frame (H, W, 3) uint8
        reference: Earlier frame from the same video (H, W, 3) uint8
        dst: Optional output array. May be reference itself, which is then
             overwritten with the motion frame.

    Returns:
        motion: Blended frame (H, W, 3) uint8

    Raises:
        ValueError: If the frames don't share shape and dtype
    """
    if current.shape != reference.shape:
        raise ValueError(
            f"Frame shape mismatch: {current.shape} vs {reference.shape}"
        )

    if current.dtype != np.uint8 or reference.dtype != np.uint8:
        raise ValueError(
            f"Expected uint8 dtype, got {current.dtype} and {reference.dtype}"
        )

    inverted = cv2.bitwise_not(reference, dst=dst)

    return cv2.addWeighted(current, 0.5, inverted, 0.5, 0, dst=inverted)
