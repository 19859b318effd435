"""
Decoded frame handed from a frame source to the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FrameData:
    """
    One decoded raster plus its place in the source.

    `frame` is a (rows, cols, 3) uint8 array in BGR order, as OpenCV decodes
    it. `position` is the frame's offset from the start of the source in
    seconds (frame_index / frame_rate).
    """
    frame: np.ndarray
    frame_index: int = 0
    position: float = 0.0
    source: Optional[str] = None

    @classmethod
    def at_index(
        cls,
        frame: np.ndarray,
        frame_index: int,
        frame_rate: float,
        source: Optional[str] = None,
    ) -> "FrameData":
        position = frame_index / frame_rate if frame_rate > 0 else 0.0
        return cls(frame=frame, frame_index=frame_index, position=position, source=source)

    @property
    def height(self) -> int:
        return int(self.frame.shape[0])

    @property
    def width(self) -> int:
        return int(self.frame.shape[1]) if self.frame.ndim > 1 else 0

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return (self.width, self.height)
