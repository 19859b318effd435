"""
Region model for named rectangular areas of the frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Region:
    """
    An axis-aligned rectangle covering [x, x + width) by [y, y + height).

    Attributes:
        name: Unique, non-empty region name.
        x: Left edge (inclusive).
        y: Top edge (inclusive).
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """
    name: str
    x: int
    y: int
    width: int
    height: int

    def contains(self, px: int, py: int) -> bool:
        """Half-open containment test."""
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
