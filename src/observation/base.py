"""
FrameSource interface for pluggable decoded-frame sources.

This defines the contract the sampling pipeline relies on:
- frame rate and frame count metadata, available once the source is open
- random access to a decoded frame by index

Decoding itself (video containers, still images) lives entirely behind this
interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Base configuration for frame sources.
    
    Attributes:
        source_id: Identifier for this source (e.g., a file name).
        metadata: Additional source-specific configuration.
    """
    source_id: str = "default"
    metadata: Dict[str, Any] = field(default_factory=dict)


class FrameSource(ABC):
    """
    Abstract base class for frame sources.
    
    Lifecycle:
        1. Create instance with config
        2. Call open() to initialize the source and read its metadata
        3. Call read_at() for the frames you need
        4. Call close() to release resources
    
    Can also be used as a context manager:
        with VideoFileSource(config) as source:
            frame_data = source.read_at(0)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False

    @property
    def source_id(self) -> str:
        """Identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open and ready to read."""
        return self._is_open

    @property
    @abstractmethod
    def frame_rate(self) -> float:
        """Frames per second."""

    @property
    @abstractmethod
    def frame_count(self) -> int:
        """Total number of frames."""

    @property
    def duration_seconds(self) -> float:
        """Total duration in seconds."""
        if self.frame_rate <= 0:
            return 0.0
        return self.frame_count / self.frame_rate

    @abstractmethod
    def open(self) -> None:
        """
        Open the source and read its metadata.
        
        Raises:
            DecodeFailureError: If the source cannot be opened or its frame
                rate / duration cannot be determined.
        """

    @abstractmethod
    def read_at(self, index: int) -> Optional[FrameData]:
        """
        Read the frame at the given index.
        
        Returns:
            FrameData for the frame, or None if no frame is available
            (past the end, decode failure).

        Raises:
            FrameUnavailableError: Optionally, for a frame that failed to decode.
        """

    @abstractmethod
    def close(self) -> None:
        """
        Release any resources held by the source.
        
        Safe to call multiple times.
        """

    def __enter__(self) -> "FrameSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()
