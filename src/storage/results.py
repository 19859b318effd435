"""
Result files for a tracking job.

Two artifacts are written per video job:
- a CSV with one row per second in which a centroid was detected
  ("second,x,y" or, with regions, "second,x,y,region")
- a plain-text summary of time spent per region and the movement timeline,
  only when regions are active and there is something to report

Rows are flushed as they are written so an interrupted job leaves a valid
CSV covering every second processed so far.
"""

from __future__ import annotations

import csv
import logging
import os
from typing import Iterable, List, Optional, TextIO, Tuple

import cv2
import numpy as np

from models.group import Group
from models.timeline import Sample, Timeline

TOTALS_HEADER = "=== TOTALS PER REGION ==="
TIMELINE_HEADER = "=== MOVEMENT TIMELINE (contiguous runs while centroid detected) ==="
NO_TOTALS = "no region totals (centroid never entered any region)"
NO_TIMELINE = "no movement timeline (no contiguous stays with centroid detected)"


def result_paths(result_dir: str, input_path: str, task_id: str) -> Tuple[str, str]:
    """
    Build the CSV and summary paths for a job.

    "videos/ball.mp4" with task "abc" gives "<dir>/ball_abc.csv" and
    "<dir>/ball_abc_summary.txt".
    """
    base_name = os.path.splitext(os.path.basename(input_path))[0] or os.path.basename(input_path)
    stem = f"{base_name}_{task_id}"
    return (
        os.path.join(result_dir, f"{stem}.csv"),
        os.path.join(result_dir, f"{stem}_summary.txt"),
    )


def render_summary(timeline: Timeline) -> List[str]:
    """Render the region totals and movement timeline as text lines."""
    lines = [TOTALS_HEADER]
    if timeline.region_seconds:
        for name, seconds in timeline.region_seconds.items():
            lines.append(f"centroid in region {name} for {seconds} seconds")
    else:
        lines.append(NO_TOTALS)

    lines.append("")

    lines.append(TIMELINE_HEADER)
    if timeline.runs:
        lines.extend(run.describe() for run in timeline.runs)
    else:
        lines.append(NO_TIMELINE)
    return lines


class ResultWriter:
    """
    Writes per-second rows and the end-of-job summary.

    Example:
        with ResultWriter(csv_path, summary_path, include_region=True) as writer:
            writer.write_sample(sample)
            ...
            writer.write_summary(timeline)
    """

    def __init__(self, csv_path: str, summary_path: Optional[str] = None, include_region: bool = False):
        self.csv_path = csv_path
        self.summary_path = summary_path
        self.include_region = include_region
        self.rows_written = 0
        self._file: Optional[TextIO] = None
        self._csv = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @property
    def header(self) -> List[str]:
        if self.include_region:
            return ["second", "x", "y", "region"]
        return ["second", "x", "y"]

    def open(self) -> None:
        if self._file is not None:
            return
        out_dir = os.path.dirname(self.csv_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        self._file = open(self.csv_path, "w", newline="")
        self._csv = csv.writer(self._file, lineterminator="\n")
        self._csv.writerow(self.header)
        self._file.flush()
        self.rows_written = 0
        logging.info(f"Writing results to {self.csv_path}")

    def write_sample(self, sample: Sample) -> bool:
        """
        Write the row for one second.

        Returns:
            False for undetected seconds, which produce no row.
        """
        if self._file is None:
            raise RuntimeError("ResultWriter must be open before writing")
        if not sample.detected:
            return False
        x, y = sample.centroid
        row = [sample.second, x, y]
        if self.include_region:
            row.append(sample.region or "")
        self._csv.writerow(row)
        self._file.flush()
        self.rows_written += 1
        return True

    def write_summary(self, timeline: Timeline) -> Optional[str]:
        """
        Write the summary file when regions are active and there is data.

        Returns:
            The summary path, or None if no summary was written.
        """
        if not self.include_region or not timeline.has_data or not self.summary_path:
            return None
        out_dir = os.path.dirname(self.summary_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(self.summary_path, "w") as f:
            for line in render_summary(timeline):
                f.write(line + "\n")
        logging.info(f"Summary written: {self.summary_path}")
        return self.summary_path

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._csv = None

    def __enter__(self) -> "ResultWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def write_groups_csv(path: str, groups: Iterable[Group]) -> int:
    """Write one "size,x,y" line per group; returns the number of lines."""
    count = 0
    with open(path, "w") as f:
        for group in groups:
            f.write(group.to_csv_row() + "\n")
            count += 1
    return count


def write_binarized_image(path: str, grid: np.ndarray) -> None:
    """Save a 0/1 grid as a black and white image (foreground white)."""
    image = (np.asarray(grid, dtype=np.uint8) * 255)
    if not cv2.imwrite(path, image):
        raise OSError(f"Failed to write image {path}")
