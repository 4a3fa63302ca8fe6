"""
Module 2 Exceptions

Custom exceptions for motion extraction.
"""


class MotionExtractionError(Exception):
    """Base exception for all motion extraction errors."""
    pass


class InvalidConfigurationError(MotionExtractionError):
    """
    Raised when the run configuration is invalid.

    This includes:
    - Both or neither of the frame/second offsets supplied
    - A negative offset
    - A missing or malformed config file
    - Out-of-range tunables (gamma, threshold, blur kernel)
    """
    pass


class InvalidOffsetError(MotionExtractionError):
    """Raised when the requested offset exceeds the length of the video."""

    def __init__(self, message: str, delay: int = None, frame_count: int = None):
        super().__init__(message)
        self.delay = delay
        self.frame_count = frame_count
