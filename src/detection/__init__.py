"""
Centroid Tracker - Detection Module

This module turns frames into binary foreground grids and finds the
connected pixel groups in them.
"""

from .base import GroupFinder, validate_grid
from .binarizer import ColorBinarizer, parse_hex_color, validate_threshold, color_distance
from .dfs_finder import DfsGroupFinder
from .opencv_finder import OpenCVGroupFinder

GROUP_FINDER_BACKENDS = {
    "dfs": DfsGroupFinder,
    "opencv": OpenCVGroupFinder,
}


def create_group_finder(backend: str = "dfs") -> GroupFinder:
    """Create a group finder for the given backend name."""
    try:
        return GROUP_FINDER_BACKENDS[backend]()
    except KeyError:
        raise ValueError(
            f"Unknown group finder backend: {backend!r} "
            f"(expected one of: {', '.join(GROUP_FINDER_BACKENDS)})"
        )


__all__ = [
    "GroupFinder",
    "validate_grid",
    "ColorBinarizer",
    "parse_hex_color",
    "validate_threshold",
    "color_distance",
    "DfsGroupFinder",
    "OpenCVGroupFinder",
    "GROUP_FINDER_BACKENDS",
    "create_group_finder",
]
