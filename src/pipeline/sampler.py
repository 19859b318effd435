"""
One-frame-per-second sampling of a frame source.
"""

from __future__ import annotations

import logging
import math
from typing import Iterator, Optional, Tuple

from models.errors import DecodeFailureError, FrameUnavailableError
from models.frame import FrameData
from observation.base import FrameSource


class FrameSampler:
    """
    Yields (second, frame) for every whole second of the source.

    Second s maps to frame index floor(s * frame_rate). Seconds run from 0 up
    to, but not including, floor(duration). A frame that cannot be read is
    yielded as None so the caller treats it as "nothing detected".
    """

    def __init__(self, source: FrameSource):
        self.source = source
        self.unavailable_seconds = 0

    @property
    def seconds(self) -> int:
        """Number of seconds that will be sampled."""
        self._check_metadata()
        return int(math.floor(self.source.duration_seconds))

    def frame_index_for(self, second: int) -> int:
        return int(math.floor(second * self.source.frame_rate))

    def samples(self) -> Iterator[Tuple[int, Optional[FrameData]]]:
        total = self.seconds
        logging.info(
            f"Sampling {total} seconds from {self.source.source_id} "
            f"(fps={self.source.frame_rate:.2f}, duration={self.source.duration_seconds:.2f}s)"
        )
        for second in range(total):
            yield second, self._read(second)

    def _read(self, second: int) -> Optional[FrameData]:
        index = self.frame_index_for(second)
        try:
            frame_data = self.source.read_at(index)
        except FrameUnavailableError as e:
            self.unavailable_seconds += 1
            logging.warning(f"Second {second}: {e}")
            return None
        if frame_data is None:
            self.unavailable_seconds += 1
            logging.warning(f"Second {second}: no frame at index {index}")
        return frame_data

    def _check_metadata(self) -> None:
        if not self.source.is_open:
            raise RuntimeError("Source must be open before sampling")
        rate = self.source.frame_rate
        duration = self.source.duration_seconds
        if rate is None or not rate > 0 or math.isinf(rate):
            raise DecodeFailureError(f"Invalid frame rate for {self.source.source_id}: {rate}")
        if duration is None or duration < 0 or math.isnan(duration) or math.isinf(duration):
            raise DecodeFailureError(f"Invalid duration for {self.source.source_id}: {duration}")
