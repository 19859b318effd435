"""
Per-second samples and the run/total aggregates built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Sample:
    """
    Result of analysing one sampled second.

    Attributes:
        second: Whole second of the source (0-based).
        centroid: (x, y) of the largest group, or None when nothing was detected.
        region: Name of the region containing the centroid; None when unlabeled.
    """
    second: int
    centroid: Optional[Tuple[int, int]] = None
    region: Optional[str] = None

    @property
    def detected(self) -> bool:
        return self.centroid is not None


@dataclass(frozen=True)
class Run:
    """
    A maximal span of detected seconds sharing the same region label.

    region is None for "detected but not in any region".
    """
    region: Optional[str]
    seconds: int

    def describe(self) -> str:
        if self.region is None:
            return f"centroid not in any region for {self.seconds} seconds"
        return f"centroid in region {self.region} for {self.seconds} seconds"


@dataclass
class Timeline:
    """Final aggregate state for one job."""
    runs: List[Run] = field(default_factory=list)
    region_seconds: Dict[str, int] = field(default_factory=dict)
    sampled_seconds: int = 0
    detected_seconds: int = 0

    @property
    def undetected_seconds(self) -> int:
        return self.sampled_seconds - self.detected_seconds

    @property
    def has_data(self) -> bool:
        return bool(self.region_seconds) or bool(self.runs)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "runs": [{"region": r.region, "seconds": r.seconds} for r in self.runs],
            "region_seconds": dict(self.region_seconds),
            "sampled_seconds": self.sampled_seconds,
            "detected_seconds": self.detected_seconds,
        }
