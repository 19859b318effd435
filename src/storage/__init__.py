"""
Centroid Tracker - Storage Module

This module writes per-second results, summaries and image-mode artifacts.
"""

from .results import (
    ResultWriter,
    render_summary,
    result_paths,
    write_binarized_image,
    write_groups_csv,
)

__all__ = [
    "ResultWriter",
    "render_summary",
    "result_paths",
    "write_binarized_image",
    "write_groups_csv",
]
