"""
Run-length aggregation of the per-second centroid stream.

The aggregator is a small state machine: it is either idle (nothing
detected) or inside a run of detected seconds that share one region label.
An undetected second closes the open run without recording the gap; a label
change closes the run and opens a new one. Seconds spent in named regions are
also totalled independently of run boundaries.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from models.timeline import Run, Sample, Timeline


class TimelineAggregator:
    """
    Folds Samples into Runs and per-region totals.

    Single use: once finish() has been called the aggregator rejects
    further samples.

    Example:
        aggregator = TimelineAggregator()
        for sample in samples:
            aggregator.observe(sample)
        timeline = aggregator.finish()
    """

    def __init__(self):
        self._runs: List[Run] = []
        self._region_seconds: Dict[str, int] = {}
        self._current_region: Optional[str] = None
        self._current_seconds = 0  # 0 = idle
        self._sampled = 0
        self._detected = 0
        self._last_second: Optional[int] = None
        self._finished = False

    @property
    def in_run(self) -> bool:
        return self._current_seconds > 0

    @property
    def current_run(self) -> Optional[Run]:
        """The open run so far, or None when idle."""
        if not self.in_run:
            return None
        return Run(self._current_region, self._current_seconds)

    @property
    def runs(self) -> List[Run]:
        """Closed runs so far."""
        return list(self._runs)

    @property
    def region_seconds(self) -> Dict[str, int]:
        return dict(self._region_seconds)

    def observe(self, sample: Sample) -> Optional[Run]:
        """
        Advance by one sampled second.

        Returns:
            The run closed by this sample, if any.
        """
        if self._finished:
            raise RuntimeError("TimelineAggregator already finished")
        if self._last_second is not None and sample.second <= self._last_second:
            raise ValueError(
                f"Samples must be in increasing second order "
                f"(got {sample.second} after {self._last_second})"
            )
        self._last_second = sample.second
        self._sampled += 1

        if not sample.detected:
            return self._close_run()

        self._detected += 1
        if sample.region is not None:
            self._region_seconds[sample.region] = self._region_seconds.get(sample.region, 0) + 1

        if self.in_run and sample.region == self._current_region:
            self._current_seconds += 1
            return None

        closed = self._close_run()
        self._current_region = sample.region
        self._current_seconds = 1
        return closed

    def finish(self) -> Timeline:
        """Close any open run and return the final aggregate."""
        if self._finished:
            raise RuntimeError("TimelineAggregator already finished")
        self._close_run()
        self._finished = True
        logging.debug(
            f"Timeline finished: sampled={self._sampled} detected={self._detected} "
            f"runs={len(self._runs)} regions={len(self._region_seconds)}"
        )
        return Timeline(
            runs=list(self._runs),
            region_seconds=dict(self._region_seconds),
            sampled_seconds=self._sampled,
            detected_seconds=self._detected,
        )

    def _close_run(self) -> Optional[Run]:
        if not self.in_run:
            return None
        run = Run(self._current_region, self._current_seconds)
        self._runs.append(run)
        self._current_region = None
        self._current_seconds = 0
        return run
