"""
Group model for connected foreground components.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class Group:
    """
    A 4-connected group of foreground pixels.

    Attributes:
        size: Number of member pixels.
        x: Centroid column (truncating average of member x coordinates).
        y: Centroid row (truncating average of member y coordinates).
    """
    size: int
    x: int
    y: int

    @property
    def centroid(self) -> Tuple[int, int]:
        """Return (x, y)."""
        return (self.x, self.y)

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        """Ordering key: size, then y, then x."""
        return (self.size, self.y, self.x)

    @classmethod
    def from_sums(cls, count: int, sum_x: int, sum_y: int) -> "Group":
        """Build a group from accumulated coordinate sums."""
        return cls(size=int(count), x=int(sum_x) // int(count), y=int(sum_y) // int(count))

    def to_csv_row(self) -> str:
        return f"{self.size},{self.x},{self.y}"


def sort_groups(groups: Iterable[Group]) -> List[Group]:
    """Sort groups largest first; ties by descending y, then descending x."""
    return sorted(groups, key=lambda g: g.sort_key, reverse=True)
