"""
Pipeline engine for the centroid tracker.

This module runs one tracking job end to end: sample one frame per second,
binarize it against the target color, take the largest connected group as
the centroid, classify it into a region, write the per-second row and fold
it into the timeline. The summary is written once the stream is exhausted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from analytics.regions import RegionClassifier, parse_regions
from analytics.timeline import TimelineAggregator
from detection import ColorBinarizer, GroupFinder, create_group_finder
from models.frame import FrameData
from models.group import Group
from models.region import Region
from models.timeline import Sample, Timeline
from observation.base import FrameSource
from pipeline.sampler import FrameSampler
from storage.results import ResultWriter


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.
    
    Attributes:
        backend: Group finder backend ("dfs" or "opencv").
        channel_order: Channel order of decoded frames ("bgr" or "rgb").
        progress_log_interval: Seconds of video between progress log messages.
    """
    backend: str = "dfs"
    channel_order: str = "bgr"
    progress_log_interval: int = 60


@dataclass
class JobResult:
    """Outcome of one tracking job."""
    timeline: Timeline
    samples: List[Sample] = field(default_factory=list)
    rows_written: int = 0
    regions_enabled: bool = False
    regions_degraded: bool = False
    unavailable_seconds: int = 0
    interrupted: bool = False
    csv_path: Optional[str] = None
    summary_path: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def detected_seconds(self) -> int:
        return self.timeline.detected_seconds


class FrameAnalyzer:
    """Per-frame analysis: binarize, group, pick the largest group."""

    def __init__(self, binarizer: ColorBinarizer, group_finder: GroupFinder):
        self.binarizer = binarizer
        self.group_finder = group_finder

    def find_groups(self, frame) -> List[Group]:
        return self.group_finder.find_connected_groups(self.binarizer.binarize(frame))

    def find_centroid(self, frame) -> Optional[Group]:
        groups = self.find_groups(frame)
        return groups[0] if groups else None


class PipelineEngine:
    """
    Runs the per-second pipeline over a FrameSource.
    
    The engine owns all state for one job (aggregator, writer); nothing is
    shared between engines, so separate jobs can run side by side.
    
    Example:
        analyzer = FrameAnalyzer(ColorBinarizer.from_hex("FF0000", 60), DfsGroupFinder())
        engine = PipelineEngine(source, analyzer, RegionClassifier(regions), writer)
        result = engine.run()
    """

    def __init__(
        self,
        source: FrameSource,
        analyzer: FrameAnalyzer,
        classifier: Optional[RegionClassifier] = None,
        writer: Optional[ResultWriter] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.source = source
        self.analyzer = analyzer
        self.classifier = classifier or RegionClassifier()
        self.writer = writer
        self.config = config or PipelineConfig()
        self._aggregator = TimelineAggregator()
        self._running = False
        self._callbacks: List[Callable[[Sample], None]] = []

    def add_callback(self, callback: Callable[[Sample], None]) -> None:
        """
        Add a callback to be called after each second is processed.
        
        Args:
            callback: Function taking the second's Sample.
        """
        self._callbacks.append(callback)

    def stop(self) -> None:
        """Signal the pipeline to stop after the current second."""
        self._running = False

    def process_frame(self, second: int, frame_data: Optional[FrameData]) -> Sample:
        """Turn one sampled frame (or its absence) into a Sample."""
        if frame_data is None:
            return Sample(second=second)
        group = self.analyzer.find_centroid(frame_data.frame)
        if group is None:
            return Sample(second=second)
        return Sample(
            second=second,
            centroid=group.centroid,
            region=self.classifier.classify(group.x, group.y),
        )

    def run(self) -> JobResult:
        """
        Run the job to completion (or until stopped/interrupted).
        
        Opens the source, processes seconds in ascending order and writes
        the summary only if the stream was exhausted. The CSV is created once
        the first second has been analyzed, so a job that fails on its first
        frame leaves no output. The region column follows the classifier:
        present exactly when regions are loaded.
        """
        self._running = True
        samples: List[Sample] = []
        interrupted = False
        sampler = FrameSampler(self.source)

        try:
            self.source.open()
            total_seconds = sampler.seconds
            if self.writer is not None:
                self.writer.include_region = self.classifier.enabled
            logging.info(
                f"Pipeline started: source={self.source.source_id}, seconds={total_seconds}, "
                f"backend={self.analyzer.group_finder.name}, regions={len(self.classifier.regions)}"
            )

            for second, frame_data in sampler.samples():
                if not self._running:
                    interrupted = True
                    logging.info(f"Pipeline stopped before second {second}")
                    break

                sample = self.process_frame(second, frame_data)
                if self.writer is not None:
                    self.writer.open()
                    self.writer.write_sample(sample)
                self._aggregator.observe(sample)
                samples.append(sample)

                for callback in self._callbacks:
                    callback(sample)

                interval = self.config.progress_log_interval
                if interval and second > 0 and second % interval == 0:
                    logging.info(f"Processed {second} seconds of {self.source.source_id}")

        except KeyboardInterrupt:
            interrupted = True
            logging.info("Pipeline interrupted by user")
        except Exception:
            if self.writer is not None:
                self.writer.close()
            raise
        finally:
            self._running = False
            self.source.close()

        timeline = self._aggregator.finish()
        result = JobResult(
            timeline=timeline,
            samples=samples,
            regions_enabled=self.classifier.enabled,
            unavailable_seconds=sampler.unavailable_seconds,
            interrupted=interrupted,
        )

        if self.writer is not None:
            self.writer.open()
            result.csv_path = self.writer.csv_path
            result.rows_written = self.writer.rows_written
            if not interrupted:
                result.summary_path = self.writer.write_summary(timeline)
            self.writer.close()

        logging.info(
            f"Processing complete: seconds={timeline.sampled_seconds}, "
            f"detected={timeline.detected_seconds}, runs={len(timeline.runs)}, "
            f"interrupted={interrupted}"
        )
        return result


RegionsArg = Union[None, Iterable[Region], Mapping[str, Any]]


def build_classifier(regions: RegionsArg) -> RegionClassifier:
    """Accept loaded Regions or a raw declaration mapping."""
    if regions is None:
        return RegionClassifier()
    if isinstance(regions, Mapping):
        return RegionClassifier(parse_regions(regions))
    return RegionClassifier(regions)


def run_job(
    source: FrameSource,
    target_color: str,
    threshold: Any,
    regions: RegionsArg = None,
    writer: Optional[ResultWriter] = None,
    backend: str = "dfs",
    channel_order: str = "bgr",
) -> JobResult:
    """
    Run one tracking job.

    Args:
        source: Frame source (opened and closed by the engine).
        target_color: 6-digit hex color, e.g. "FF0000".
        threshold: Maximum color distance (0-255).
        regions: Loaded Regions, a declaration mapping, or None.
        writer: Optional ResultWriter for the CSV/summary artifacts.
        backend: Group finder backend.
        channel_order: Channel order of decoded frames.

    Raises:
        InvalidInputError: Malformed color, threshold, regions or frame geometry.
        DecodeFailureError: The source could not be opened.
    """
    binarizer = ColorBinarizer.from_hex(target_color, threshold, channel_order=channel_order)
    classifier = build_classifier(regions)
    analyzer = FrameAnalyzer(binarizer, create_group_finder(backend))
    config = PipelineConfig(backend=backend, channel_order=channel_order)
    return PipelineEngine(source, analyzer, classifier, writer, config).run()
