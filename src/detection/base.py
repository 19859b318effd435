"""
Group finder interfaces.

We keep this lightweight so the project can support multiple backends:
- pure Python explicit-stack traversal (reference implementation)
- OpenCV connected-component labelling (fast path for large frames)

Both backends return identical, identically ordered groups.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np

from models.errors import InvalidInputError
from models.group import Group

PixelGrid = Union[np.ndarray, Sequence[Sequence[int]]]


def validate_grid(image: PixelGrid) -> np.ndarray:
    """
    Check that image is a non-empty rectangular 0/1 grid.

    Returns a private uint8 copy that callers are free to mutate.

    Raises:
        InvalidInputError: reason is one of "null_grid", "null_row", "empty",
            "ragged", "shape" or "values".
    """
    if image is None:
        raise InvalidInputError("Image must not be None", reason="null_grid")

    if isinstance(image, np.ndarray):
        if image.ndim != 2:
            raise InvalidInputError(
                f"Image must be 2-dimensional, got shape {image.shape}", reason="shape"
            )
        if image.size == 0:
            raise InvalidInputError("Image must not be empty", reason="empty")
        try:
            grid = np.array(image, dtype=np.int64)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Image cells must be integers: {e}", reason="shape") from e
    else:
        try:
            row_count = len(image)
        except TypeError as e:
            raise InvalidInputError(
                f"Image must be a sequence of rows, got {type(image).__name__}", reason="shape"
            ) from e
        if row_count == 0:
            raise InvalidInputError("Image must have at least one row", reason="empty")
        width = None
        for i, row in enumerate(image):
            if row is None:
                raise InvalidInputError(f"Row {i} is None", reason="null_row", detail=str(i))
            try:
                row_width = len(row)
            except TypeError as e:
                raise InvalidInputError(
                    f"Row {i} is not a sequence: {row!r}", reason="shape", detail=str(i)
                ) from e
            if width is None:
                width = row_width
            elif row_width != width:
                raise InvalidInputError(
                    f"Row {i} has length {row_width}, expected {width}",
                    reason="ragged",
                    detail=str(i),
                )
        if width == 0:
            raise InvalidInputError("Image rows must not be empty", reason="empty")
        try:
            grid = np.array([list(row) for row in image], dtype=np.int64)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Image cells must be integers: {e}", reason="shape") from e

    if np.any((grid != 0) & (grid != 1)):
        raise InvalidInputError("Image may only contain 0 and 1", reason="values")
    return grid.astype(np.uint8)


class GroupFinder:
    """Group finder interface returning groups sorted largest first."""

    name = "base"

    def find_connected_groups(self, image: PixelGrid) -> List[Group]:
        """
        Find 4-connected groups of 1s in a binary image.

        Column index is x (grows rightward) and row index is y (grows
        downward). Centroids use integer division of the coordinate sums.
        Groups are sorted by size descending; ties are broken by descending
        y, then descending x. The input grid is not modified.
        """
        raise NotImplementedError

    def find_largest(self, image: PixelGrid) -> Optional[Group]:
        """Return the first (largest) group, or None if there is none."""
        groups = self.find_connected_groups(image)
        return groups[0] if groups else None
