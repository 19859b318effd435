"""
OpenCV connected-component group finder.

Labels components with cv2.connectedComponents (4-connectivity) and reduces
each label to its pixel count and integer coordinate sums with np.bincount.
OpenCV's own centroids are floating point, so they are not used.
"""

from __future__ import annotations

from typing import List

import cv2
import numpy as np

from models.group import Group, sort_groups
from .base import GroupFinder, PixelGrid, validate_grid


class OpenCVGroupFinder(GroupFinder):
    name = "opencv"

    def find_connected_groups(self, image: PixelGrid) -> List[Group]:
        grid = validate_grid(image)
        num_labels, labels = cv2.connectedComponents(grid, connectivity=4, ltype=cv2.CV_32S)
        if num_labels <= 1:
            return []

        flat = labels.ravel()
        ys, xs = np.indices(labels.shape)
        counts = np.bincount(flat, minlength=num_labels)
        sum_x = np.bincount(flat, weights=xs.ravel(), minlength=num_labels)
        sum_y = np.bincount(flat, weights=ys.ravel(), minlength=num_labels)

        # Label 0 is the background.
        groups = [
            Group.from_sums(int(counts[label]), int(sum_x[label]), int(sum_y[label]))
            for label in range(1, num_labels)
        ]
        return sort_groups(groups)
