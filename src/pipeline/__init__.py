"""
Pipeline module for the centroid tracker.

The pipeline orchestrates the full processing flow:
- One-frame-per-second sampling from a frame source
- Binarization and connected-group detection
- Region classification and timeline aggregation
- Result file output
"""

from .engine import (
    FrameAnalyzer,
    JobResult,
    PipelineConfig,
    PipelineEngine,
    build_classifier,
    run_job,
)
from .sampler import FrameSampler

__all__ = [
    "FrameAnalyzer",
    "FrameSampler",
    "JobResult",
    "PipelineConfig",
    "PipelineEngine",
    "build_classifier",
    "run_job",
]
