"""
Post-processing of motion frames.

Two mutually exclusive modes:
    GAMMA   - brighten the raw motion frame with the gamma lookup table
    OVERLAY - binarize the motion frame into a mask and OR it onto the
              original frame, so moving regions saturate to white
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import cv2

from .gamma import apply_gamma
from .exceptions import InvalidConfigurationError


# Type alias for Frame
Frame = np.ndarray  # Shape: (H, W, 3), dtype: uint8, range: [0, 255]

DEFAULT_THRESHOLD = 129
DEFAULT_BLUR_KERNEL = 3


class PostProcessMode(Enum):
    GAMMA = "gamma"
    OVERLAY = "overlay"


def overlay_motion(
    motion: Frame,
    current: Frame,
    threshold: int = DEFAULT_THRESHOLD,
    blur_kernel: int = DEFAULT_BLUR_KERNEL,
    dst: Optional[Frame] = None
) -> Frame:
    """
    Composite a binarized motion mask onto the original frame.

    Args:
        motion: Comparator output (H, W, 3) uint8
        current: Original current frame (H, W, 3) uint8
        threshold: Gray values <= threshold become black, the rest white
        blur_kernel: Side of the box blur applied to the mask
        dst: Optional output array. May be motion itself, which is no longer
             read once the mask has been computed.

    Returns:
        composite: (H, W, 3) uint8, never darker than current in any channel
    """
    gray = cv2.cvtColor(motion, cv2.COLOR_RGB2GRAY)
    _, mask = cv2.threshold(gray, threshold, 255, cv2.THRESH_BINARY, dst=gray)
    mask = cv2.blur(mask, (blur_kernel, blur_kernel))
    mask = cv2.cvtColor(mask, cv2.COLOR_GRAY2RGB, dst=dst)

    return cv2.bitwise_or(current, mask, dst=mask)


def post_process(
    mode: PostProcessMode,
    motion: Frame,
    current: Frame,
    gamma_table: np.ndarray,
    threshold: int = DEFAULT_THRESHOLD,
    blur_kernel: int = DEFAULT_BLUR_KERNEL,
    dst: Optional[Frame] = None
) -> Frame:
    """
    Apply the selected post-processing mode to a motion frame.

    Args:
        mode: PostProcessMode.GAMMA or PostProcessMode.OVERLAY
        motion: Comparator output (H, W, 3) uint8
        current: Current frame the motion frame was computed from
        gamma_table: Lookup table from build_gamma_table() (GAMMA mode)
        threshold: Binarization threshold (OVERLAY mode)
        blur_kernel: Mask blur size (OVERLAY mode)
        dst: Optional output array, may be motion itself

    Returns:
        frame: Post-processed frame, same shape as motion
    """
    if mode is PostProcessMode.GAMMA:
        return apply_gamma(motion, gamma_table, dst=dst)
    elif mode is PostProcessMode.OVERLAY:
        return overlay_motion(motion, current, threshold, blur_kernel, dst=dst)
    else:
        raise ValueError(f"Unknown post-processing mode: {mode}")


@dataclass(frozen=True, eq=False)
class PostProcessor:
    """Post-processing settings bound for the duration of a run."""
    mode: PostProcessMode
    gamma_table: np.ndarray
    threshold: int = DEFAULT_THRESHOLD
    blur_kernel: int = DEFAULT_BLUR_KERNEL

    def __post_init__(self):
        if not 0 <= self.threshold <= 255:
            raise InvalidConfigurationError(
                f"Overlay threshold must be in range [0, 255], got {self.threshold}"
            )

        if self.blur_kernel < 1:
            raise InvalidConfigurationError(
                f"Blur kernel must be a positive integer, got {self.blur_kernel}"
            )

    def __call__(self, motion: Frame, current: Frame, dst: Optional[Frame] = None) -> Frame:
        return post_process(
            self.mode,
            motion,
            current,
            self.gamma_table,
            self.threshold,
            self.blur_kernel,
            dst=dst
        )
