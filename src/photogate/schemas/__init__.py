"""Data schemas for records exchanged with the camera layer."""

from .capture_result import AwbState, CaptureResultRecord

__all__ = [
    "AwbState",
    "CaptureResultRecord",
]
