"""
Module 1 Exceptions

Custom exceptions for opening and writing video files.
"""


class VideoIOError(Exception):
    """Base exception for all video I/O errors."""
    pass


class SourceUnavailableError(VideoIOError):
    """
    Raised when the input video cannot be opened.

    This can occur due to:
    - File not found
    - Missing read permissions
    - Unsupported container or codec
    """

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class SinkUnavailableError(VideoIOError):
    """
    Raised when the output video cannot be created.

    This can occur due to:
    - Output directory not writable
    - Codec not available in the OpenCV build
    """

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path
