"""
OpenCV-based frame sources.

Supports:
- Video files (any container/codec the local OpenCV/FFmpeg build can decode)
- Still images, exposed as a one-second, one-frame source
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import cv2
import numpy as np

from models.errors import DecodeFailureError, FrameUnavailableError
from models.frame import FrameData
from .base import FrameSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based frame sources.
    
    Attributes:
        path: Path to the video or image file.
        max_forward_grab: Largest forward gap (in frames) bridged by grabbing
            frames sequentially instead of seeking.
    """
    path: str = ""
    max_forward_grab: int = 60

    @classmethod
    def from_path(cls, path: str, **kwargs: Any) -> "OpenCVSourceConfig":
        """Adapter: Create config for a file, using its base name as source id."""
        return cls(source_id=os.path.basename(path), path=path, **kwargs)


class VideoFileSource(FrameSource):
    """
    Video file source backed by cv2.VideoCapture.
    
    Frame rate and frame count come from the container metadata. Frames are
    fetched by index: short forward gaps are bridged with grab(), anything
    else seeks with CAP_PROP_POS_FRAMES.
    
    Example:
        with VideoFileSource(OpenCVSourceConfig.from_path("clip.mp4")) as source:
            frame_data = source.read_at(int(3 * source.frame_rate))
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._fps = 0.0
        self._frame_count = 0
        self._next_index = 0

    @property
    def path(self) -> str:
        return self._opencv_config.path

    @property
    def frame_rate(self) -> float:
        return self._fps

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def open(self) -> None:
        """Open the video file and read its metadata."""
        if self._is_open:
            return

        if not os.path.exists(self.path):
            raise DecodeFailureError(f"Video file not found: {self.path}")

        self._cap = cv2.VideoCapture(self.path)
        if not self._cap.isOpened():
            self._release()
            raise DecodeFailureError(f"Failed to open video {self.path}")

        fps = self._cap.get(cv2.CAP_PROP_FPS)
        frame_count = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        if not fps or fps <= 0 or np.isnan(fps):
            self._release()
            raise DecodeFailureError(f"Video {self.path} reports no usable frame rate ({fps})")
        if frame_count <= 0:
            self._release()
            raise DecodeFailureError(f"Video {self.path} reports no frames")

        self._fps = float(fps)
        self._frame_count = frame_count
        self._next_index = 0
        self._is_open = True

        logging.info(
            f"VideoFileSource opened: source_id={self.source_id}, fps={self._fps:.2f}, "
            f"frames={self._frame_count}, duration={self.duration_seconds:.2f}s"
        )

    def read_at(self, index: int) -> Optional[FrameData]:
        """Read the frame at index, or None when it cannot be decoded."""
        if not self._is_open or self._cap is None:
            return None
        if index < 0 or index >= self._frame_count:
            logging.debug(f"Frame {index} outside 0..{self._frame_count - 1}")
            return None

        try:
            self._position_at(index)
            ret, frame = self._cap.read()
        except cv2.error as e:
            self._next_index = -1
            raise FrameUnavailableError(f"Decode error at frame {index}: {e}", frame_index=index) from e

        if not ret or frame is None:
            self._next_index = -1
            logging.warning(f"No frame returned for index {index}")
            return None

        self._next_index = index + 1
        return FrameData.at_index(frame, index, self._fps, source=self.source_id)

    def _position_at(self, index: int) -> None:
        gap = index - self._next_index
        if self._next_index >= 0 and 0 <= gap <= self._opencv_config.max_forward_grab:
            for _ in range(gap):
                if not self._cap.grab():
                    break
        else:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, index)

    def close(self) -> None:
        """Close the video file and release resources."""
        was_open = self._is_open
        self._release()
        self._is_open = False
        if was_open:
            logging.info(f"VideoFileSource closed: source_id={self.source_id}")

    def _release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


class ImageFileSource(FrameSource):
    """
    A still image presented as a one-second video with a single frame.
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._frame: Optional[np.ndarray] = None

    @property
    def frame_rate(self) -> float:
        return 1.0

    @property
    def frame_count(self) -> int:
        return 1 if self._frame is not None else 0

    def open(self) -> None:
        if self._is_open:
            return
        path = self._opencv_config.path
        frame = cv2.imread(path, cv2.IMREAD_COLOR)
        if frame is None:
            raise DecodeFailureError(f"Failed to read image {path}")
        self._frame = frame
        self._is_open = True
        logging.info(
            f"ImageFileSource opened: source_id={self.source_id}, "
            f"size={frame.shape[1]}x{frame.shape[0]}"
        )

    def read_at(self, index: int) -> Optional[FrameData]:
        if not self._is_open or self._frame is None or index != 0:
            return None
        return FrameData(self._frame, frame_index=0, position=0.0, source=self.source_id)

    def close(self) -> None:
        self._frame = None
        self._is_open = False


IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")


def create_source_from_path(path: str, **kwargs: Any) -> FrameSource:
    """Pick an image or video source based on the file extension."""
    config = OpenCVSourceConfig.from_path(path, **kwargs)
    if path.lower().endswith(IMAGE_EXTENSIONS):
        return ImageFileSource(config)
    return VideoFileSource(config)
