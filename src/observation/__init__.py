"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (video file, still image) from
the processing pipeline. Each source implements the FrameSource interface
and returns FrameData objects.
"""

from .base import FrameSource, ObservationConfig
from .opencv_source import (
    ImageFileSource,
    OpenCVSourceConfig,
    VideoFileSource,
    create_source_from_path,
)

__all__ = [
    "FrameSource",
    "ObservationConfig",
    "ImageFileSource",
    "OpenCVSourceConfig",
    "VideoFileSource",
    "create_source_from_path",
]
