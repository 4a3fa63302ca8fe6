"""
Gamma lookup table.

The table is computed once at startup and handed to the post processor.
"""

import math
from typing import Optional

import numpy as np
import cv2

from .exceptions import InvalidConfigurationError


# Mild brightening curve applied to the difference frames
DEFAULT_GAMMA = 1 / 1.1


def build_gamma_table(gamma: float = DEFAULT_GAMMA) -> np.ndarray:
    """
    Precompute gamma correction for every 8-bit intensity.

    Args:
        gamma: Exponent of the curve. < 1 brightens, > 1 darkens.

    Returns:
        table: Read-only array of shape (256,), dtype uint8, where
               table[i] = round(255 * (i / 255) ** gamma)

    Raises:
        InvalidConfigurationError: If gamma is not a positive finite number
    """
    if not math.isfinite(gamma) or gamma <= 0:
        raise InvalidConfigurationError(f"Gamma must be a positive number, got {gamma}")

    intensities = np.arange(256, dtype=np.float64) / 255.0
    table = np.clip(np.rint(np.power(intensities, gamma) * 255.0), 0, 255).astype(np.uint8)
    table.flags.writeable = False

    return table


def apply_gamma(frame: np.ndarray, table: np.ndarray, dst: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Apply the lookup table to every channel of every pixel.

    dst may be frame itself, in which case the frame is corrected in place.
    """
    return cv2.LUT(frame, table, dst=dst)
