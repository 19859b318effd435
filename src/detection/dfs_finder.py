"""
Explicit-stack depth-first group finder.

Frames can reach millions of pixels, so the traversal never recurses: each
component is walked with a list used as a stack, and cells are zeroed in a
private copy as soon as they are pushed so none is counted twice.
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.group import Group, sort_groups
from .base import GroupFinder, PixelGrid, validate_grid


class DfsGroupFinder(GroupFinder):
    name = "dfs"

    def find_connected_groups(self, image: PixelGrid) -> List[Group]:
        grid = validate_grid(image)
        height, width = grid.shape
        total = height * width
        cells = bytearray(grid.tobytes())

        groups: List[Group] = []
        for seed in np.flatnonzero(grid).tolist():
            if not cells[seed]:
                continue
            cells[seed] = 0
            stack = [seed]
            count = sum_x = sum_y = 0

            while stack:
                pos = stack.pop()
                row, col = divmod(pos, width)
                count += 1
                sum_x += col
                sum_y += row

                if col > 0 and cells[pos - 1]:
                    cells[pos - 1] = 0
                    stack.append(pos - 1)
                if col < width - 1 and cells[pos + 1]:
                    cells[pos + 1] = 0
                    stack.append(pos + 1)
                if pos >= width and cells[pos - width]:
                    cells[pos - width] = 0
                    stack.append(pos - width)
                if pos + width < total and cells[pos + width]:
                    cells[pos + width] = 0
                    stack.append(pos + width)

            groups.append(Group.from_sums(count, sum_x, sum_y))

        return sort_groups(groups)
