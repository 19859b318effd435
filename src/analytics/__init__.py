"""
Analytics for the centroid stream: region classification and
run-length timeline aggregation.
"""

from .regions import (
    RegionClassifier,
    RegionSpec,
    load_regions,
    load_regions_or_warn,
    parse_regions,
)
from .timeline import TimelineAggregator

__all__ = [
    "RegionClassifier",
    "RegionSpec",
    "load_regions",
    "load_regions_or_warn",
    "parse_regions",
    "TimelineAggregator",
]
