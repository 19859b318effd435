"""
Color-distance binarization.

A pixel is foreground when the Euclidean distance between its RGB value and
the target color is at most the threshold. The comparison is done on squared
integer distances so no floating point rounding is involved.
"""

from __future__ import annotations

import math
import re
from typing import Any, Tuple

import numpy as np

from models.errors import InvalidInputError

RGB = Tuple[int, int, int]

_HEX_COLOR = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def parse_hex_color(value: str) -> RGB:
    """
    Parse a 6-digit hex color ("FF8800" or "#FF8800") into (r, g, b).

    Raises:
        InvalidInputError: If the value is not a 6-digit hex string.
    """
    match = _HEX_COLOR.match(str(value).strip()) if value is not None else None
    if not match:
        raise InvalidInputError(
            f"Target color must be a 6-digit hex code (e.g. FF0000), got {value!r}",
            reason="field_type",
            detail="target_color",
        )
    packed = int(match.group(1), 16)
    return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)


def validate_threshold(value: Any) -> int:
    """Return value as an int in [0, 255] or raise InvalidInputError."""
    if isinstance(value, bool):
        raise InvalidInputError("Threshold must be a number", reason="field_type", detail="threshold")
    try:
        threshold = int(str(value).strip()) if isinstance(value, str) else value
    except ValueError:
        raise InvalidInputError(
            f"Threshold must be an integer, got {value!r}", reason="field_type", detail="threshold"
        )
    if not isinstance(threshold, (int, np.integer)):
        raise InvalidInputError(
            f"Threshold must be an integer, got {value!r}", reason="field_type", detail="threshold"
        )
    if threshold < 0 or threshold > 255:
        raise InvalidInputError(
            f"Threshold must be between 0 and 255, got {threshold}", reason="range", detail="threshold"
        )
    return int(threshold)


def color_distance(a: RGB, b: RGB) -> float:
    """Euclidean distance between two RGB triples."""
    return math.sqrt(sum((int(p) - int(q)) ** 2 for p, q in zip(a, b)))


class ColorBinarizer:
    """
    Turn color frames into 0/1 grids by distance to a target color.

    Frames are expected in OpenCV's BGR channel order unless channel_order
    is "rgb".
    """

    def __init__(self, target_rgb: RGB, threshold: int, channel_order: str = "bgr"):
        if channel_order not in ("bgr", "rgb"):
            raise ValueError(f"channel_order must be 'bgr' or 'rgb', got {channel_order!r}")
        self.target_rgb = tuple(int(c) for c in target_rgb)
        self.threshold = int(threshold)
        self.channel_order = channel_order
        ordered = self.target_rgb[::-1] if channel_order == "bgr" else self.target_rgb
        self._target = np.array(ordered, dtype=np.int32)
        self._threshold_sq = self.threshold * self.threshold

    @classmethod
    def from_hex(cls, hex_color: str, threshold: Any, channel_order: str = "bgr") -> "ColorBinarizer":
        return cls(parse_hex_color(hex_color), validate_threshold(threshold), channel_order)

    def binarize(self, frame: np.ndarray) -> np.ndarray:
        """
        Binarize a (rows, cols, 3) frame.

        Returns:
            uint8 array of shape (rows, cols); 1 marks foreground pixels.

        Raises:
            InvalidInputError: If the frame geometry is malformed.
        """
        if frame is None:
            raise InvalidInputError("Frame must not be None", reason="null_grid")
        frame = np.asarray(frame)
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise InvalidInputError(
                f"Frame must have shape (rows, cols, 3), got {frame.shape}", reason="shape"
            )
        if frame.shape[0] == 0 or frame.shape[1] == 0:
            raise InvalidInputError("Frame must not be empty", reason="empty")

        diff = frame.astype(np.int32) - self._target
        dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
        return (dist_sq <= self._threshold_sq).astype(np.uint8)

    def is_match(self, rgb: RGB) -> bool:
        """Check a single RGB pixel against the target."""
        diff = [int(p) - int(q) for p, q in zip(rgb, self.target_rgb)]
        return sum(d * d for d in diff) <= self._threshold_sq
