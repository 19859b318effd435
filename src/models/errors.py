"""
Exception types raised by the tracking core.

Callers can tell failure causes apart by type and, for invalid input, by the
``reason`` attribute (e.g. "ragged", "null_row", "empty", "field_type").
"""

from __future__ import annotations

from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""


class InvalidInputError(TrackerError, ValueError):
    """
    Malformed input that aborts a job before any output is written.

    Attributes:
        reason: Short machine-readable cause.
        detail: Optional extra context (row index, field name, ...).
    """

    def __init__(self, message: str, reason: str = "invalid", detail: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.detail = detail


class RegionLoadError(TrackerError):
    """Region declarations could not be read or parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FrameUnavailableError(TrackerError):
    """A single frame could not be obtained; treated as "no detection"."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        super().__init__(message)
        self.frame_index = frame_index


class DecodeFailureError(TrackerError, RuntimeError):
    """The frame source could not be opened or its metadata read."""
