"""
Run configuration for motion extraction.

Tunables (gamma, overlay threshold, blur kernel, output codec) come from a
YAML file; the offset and overlay flag come from the command line.
"""

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .exceptions import InvalidConfigurationError, InvalidOffsetError
from .gamma import DEFAULT_GAMMA
from .post_processing import DEFAULT_THRESHOLD, DEFAULT_BLUR_KERNEL, PostProcessMode


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.yaml")


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable settings for a single run."""
    delay: int
    overlay: bool = False
    gamma: float = DEFAULT_GAMMA
    threshold: int = DEFAULT_THRESHOLD
    blur_kernel: int = DEFAULT_BLUR_KERNEL

    def __post_init__(self):
        if self.delay < 0:
            raise InvalidConfigurationError(
                f"Frame delay must be non-negative, got {self.delay}"
            )

    @property
    def mode(self) -> PostProcessMode:
        return PostProcessMode.OVERLAY if self.overlay else PostProcessMode.GAMMA

    @classmethod
    def from_dict(cls, config: Dict[str, Any], delay: int, overlay: bool = False) -> "PipelineConfig":
        """
        Build a PipelineConfig from a loaded configuration dictionary.

        Args:
            config: Dictionary as returned by load_config()
            delay: Offset in frames
            overlay: Whether overlay mode is enabled
        """
        post = _section(config, "post_processing")
        overlay_section = _section(post, "overlay", "post_processing.overlay")

        try:
            return cls(
                delay=delay,
                overlay=overlay,
                gamma=float(post.get("gamma", DEFAULT_GAMMA)),
                threshold=int(overlay_section.get("threshold", DEFAULT_THRESHOLD)),
                blur_kernel=int(overlay_section.get("blur_kernel", DEFAULT_BLUR_KERNEL)),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"Invalid post_processing settings: {e}") from e


def _section(config: Dict[str, Any], key: str, name: Optional[str] = None) -> Dict[str, Any]:
    """Return a nested mapping, treating a missing key as empty."""
    section = config.get(key)
    if section is None and key not in config:
        return {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(
            f"Config section '{name or key}' must be a mapping, got {type(section).__name__}"
        )
    return section


def get_default_config() -> Dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "post_processing": {
            "gamma": DEFAULT_GAMMA,
            "overlay": {
                "threshold": DEFAULT_THRESHOLD,
                "blur_kernel": DEFAULT_BLUR_KERNEL
            }
        },
        "output": {
            "codec": "mp4v"
        }
    }


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check the shape of a merged configuration and coerce its values.

    Args:
        config: Configuration dictionary (defaults merged with a YAML file)

    Returns:
        config: The same dictionary, with gamma as float, threshold and
                blur_kernel as int

    Raises:
        InvalidConfigurationError: If a section is not a mapping or a value
                                   has the wrong type
    """
    post = _section(config, "post_processing")
    overlay_section = _section(post, "overlay", "post_processing.overlay")
    output = _section(config, "output")

    try:
        post["gamma"] = float(post.get("gamma", DEFAULT_GAMMA))
        overlay_section["threshold"] = int(overlay_section.get("threshold", DEFAULT_THRESHOLD))
        overlay_section["blur_kernel"] = int(overlay_section.get("blur_kernel", DEFAULT_BLUR_KERNEL))
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Invalid post_processing settings: {e}") from e

    codec = output.get("codec", "mp4v")
    if not isinstance(codec, str) or not codec:
        raise InvalidConfigurationError(f"output.codec must be a non-empty string, got {codec!r}")

    return config


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file, on top of the hardcoded defaults.

    Args:
        config_path: Path to config file. If None, the packaged
                     default_config.yaml is used when present.

    Returns:
        config: Configuration dictionary

    Raises:
        InvalidConfigurationError: If an explicitly given file is missing,
                                   is not a YAML mapping or holds values
                                   of the wrong type
    """
    defaults = get_default_config()

    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            logger.warning(f"Default config not found at {DEFAULT_CONFIG_PATH}, using built-in defaults")
            return validate_config(defaults)
        config_path = DEFAULT_CONFIG_PATH
    elif not os.path.exists(config_path):
        raise InvalidConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InvalidConfigurationError(f"Could not read config file {config_path}: {e}") from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise InvalidConfigurationError(
            f"Config file {config_path} must contain a mapping, got {type(loaded).__name__}"
        )

    logger.info(f"Loaded configuration from {config_path}")
    return validate_config(_merge(defaults, loaded))


def check_offset_arguments(frames: Optional[int], seconds: Optional[float]) -> None:
    """
    Validate the command-line offset flags.

    Raises:
        InvalidConfigurationError: If both or neither offset is given, or
                                   the offset is negative
    """
    if frames is not None and seconds is not None:
        raise InvalidConfigurationError("Options -f and -s are mutually exclusive.")

    if frames is None and seconds is None:
        raise InvalidConfigurationError(
            "You must provide either a seconds or frames offset with -s or -f."
        )

    if frames is not None and frames < 0:
        raise InvalidConfigurationError("Frames must be a positive number.")

    if seconds is not None and seconds < 0:
        raise InvalidConfigurationError("Seconds must be a positive number.")


def resolve_delay(
    frames: Optional[int],
    seconds: Optional[float],
    fps: float
) -> int:
    """
    Turn the command-line offset into a frame count.

    Exactly one of frames/seconds must be given. Seconds are multiplied by
    the frame rate and truncated.

    Raises:
        InvalidConfigurationError: See check_offset_arguments()
    """
    check_offset_arguments(frames, seconds)

    if frames is not None:
        return int(frames)

    return int(seconds * fps)


def validate_offset(
    delay: int,
    frame_count: int,
    fps: Optional[float] = None,
    seconds: Optional[float] = None
) -> None:
    """
    Check that the offset fits inside the video.

    Args:
        delay: Offset in frames
        frame_count: Total frames in the input video
        fps: Frame rate, used to report the limit in seconds
        seconds: The offset as given on the command line, if in seconds

    Raises:
        InvalidOffsetError: If delay > frame_count
    """
    if delay <= frame_count:
        return

    if seconds is not None and fps:
        message = (
            f"Input video is only {int(frame_count / fps)} second(s) long. "
            f"Cannot offset by {seconds:g} second(s)."
        )
    else:
        message = (
            f"Input video only has {frame_count} frame(s). "
            f"Cannot offset by {delay} frame(s)."
        )

    raise InvalidOffsetError(message, delay=delay, frame_count=frame_count)
