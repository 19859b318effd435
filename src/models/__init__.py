"""
Typed models for the centroid tracker.

These models are plain dataclasses shared by the detection, analytics,
pipeline and storage layers.
"""

from .frame import FrameData
from .group import Group, sort_groups
from .region import Region
from .timeline import Sample, Run, Timeline
from .errors import (
    TrackerError,
    InvalidInputError,
    RegionLoadError,
    FrameUnavailableError,
    DecodeFailureError,
)
from .config import (
    Config,
    DetectionConfig,
    RegionsConfig,
    StorageConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Group",
    "sort_groups",
    # Regions / timeline
    "Region",
    "Sample",
    "Run",
    "Timeline",
    # Errors
    "TrackerError",
    "InvalidInputError",
    "RegionLoadError",
    "FrameUnavailableError",
    "DecodeFailureError",
    # Config
    "Config",
    "DetectionConfig",
    "RegionsConfig",
    "StorageConfig",
]
