"""
Tests for frame sampling and the pipeline engine.
"""

import logging

import numpy as np
import pytest

from analytics.regions import RegionClassifier
from detection import ColorBinarizer, DfsGroupFinder
from models.errors import DecodeFailureError, FrameUnavailableError, InvalidInputError
from models.frame import FrameData
from models.region import Region
from models.timeline import Run, Sample
from observation.base import FrameSource, ObservationConfig
from pipeline.engine import FrameAnalyzer, PipelineConfig, PipelineEngine, run_job
from pipeline.sampler import FrameSampler
from storage.results import ResultWriter

RED = (0, 0, 255)
BLUE = (255, 0, 0)


class MockFrameSource(FrameSource):
    """In-memory frame source; None entries simulate undecodable frames."""

    def __init__(self, frames, fps=1.0, fail_at=(), fail_open=False, source_id="mock"):
        super().__init__(ObservationConfig(source_id=source_id))
        self._frames = list(frames)
        self._fps = fps
        self._fail_at = set(fail_at)
        self._fail_open = fail_open
        self.requested = []
        self.closed = False

    @property
    def frame_rate(self):
        return self._fps

    @property
    def frame_count(self):
        return len(self._frames)

    def open(self):
        if self._fail_open:
            raise DecodeFailureError("cannot open mock")
        self._is_open = True

    def read_at(self, index):
        self.requested.append(index)
        if index in self._fail_at:
            raise FrameUnavailableError("corrupt frame", frame_index=index)
        if index >= len(self._frames) or self._frames[index] is None:
            return None
        return FrameData.at_index(self._frames[index], index, self._fps)

    def close(self):
        self._is_open = False
        self.closed = True


def _engine(source, regions=(), writer=None):
    analyzer = FrameAnalyzer(ColorBinarizer.from_hex("FF0000", 30), DfsGroupFinder())
    return PipelineEngine(source, analyzer, RegionClassifier(regions), writer, PipelineConfig())


class TestFrameSampler:
    def test_one_frame_per_second(self):
        source = MockFrameSource([np.zeros((2, 2, 3), np.uint8)] * 7, fps=2.0)
        source.open()
        sampled = list(FrameSampler(source).samples())
        # duration 3.5s -> seconds 0, 1, 2
        assert [s for s, _ in sampled] == [0, 1, 2]
        assert source.requested == [0, 2, 4]

    def test_fractional_frame_rate_floors_index(self):
        source = MockFrameSource([np.zeros((1, 1, 3), np.uint8)] * 100, fps=29.97)
        source.open()
        sampler = FrameSampler(source)
        assert sampler.frame_index_for(1) == 29
        assert sampler.frame_index_for(3) == 89
        assert sampler.seconds == 3

    def test_missing_frame_yields_none(self):
        source = MockFrameSource([np.zeros((1, 1, 3), np.uint8), None, np.zeros((1, 1, 3), np.uint8)])
        source.open()
        sampler = FrameSampler(source)
        frames = [f for _, f in sampler.samples()]
        assert frames[1] is None
        assert frames[0] is not None
        assert sampler.unavailable_seconds == 1

    def test_frame_unavailable_is_downgraded(self):
        source = MockFrameSource([np.zeros((1, 1, 3), np.uint8)] * 3, fail_at={1})
        source.open()
        sampler = FrameSampler(source)
        frames = [f for _, f in sampler.samples()]
        assert frames[1] is None
        assert sampler.unavailable_seconds == 1

    def test_frame_unavailable_logged_once(self, caplog):
        source = MockFrameSource([np.zeros((1, 1, 3), np.uint8)] * 2, fail_at={1})
        source.open()
        with caplog.at_level(logging.WARNING):
            list(FrameSampler(source).samples())
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "corrupt frame" in warnings[0].getMessage()

    def test_requires_open_source(self):
        with pytest.raises(RuntimeError):
            FrameSampler(MockFrameSource([])).seconds

    def test_invalid_frame_rate(self):
        source = MockFrameSource([np.zeros((1, 1, 3), np.uint8)], fps=0.0)
        source.open()
        with pytest.raises(DecodeFailureError):
            FrameSampler(source).seconds


class TestFrameAnalyzer:
    def test_largest_group_wins(self, frame_factory):
        frame = frame_factory([(2, 2, 3, RED), (30, 20, 5, RED)])
        analyzer = FrameAnalyzer(ColorBinarizer.from_hex("FF0000", 30), DfsGroupFinder())
        group = analyzer.find_centroid(frame)
        assert group.size == 25
        assert group.centroid == (32, 22)

    def test_other_colors_ignored(self, frame_factory):
        frame = frame_factory([(2, 2, 5, BLUE)])
        analyzer = FrameAnalyzer(ColorBinarizer.from_hex("FF0000", 30), DfsGroupFinder())
        assert analyzer.find_centroid(frame) is None


class TestPipelineEngine:
    def test_end_to_end_with_regions(self, tmp_path, frame_factory):
        left = frame_factory([(0, 0, 5, RED)])      # centroid (2, 2)
        right = frame_factory([(40, 0, 5, RED)])    # centroid (42, 2)
        middle = frame_factory([(20, 30, 5, RED)])  # centroid (22, 32), no region
        empty = frame_factory([])
        frames = [left, left, left, empty, None, left, right, middle]
        regions = [Region("Left", 0, 0, 10, 10), Region("Right", 40, 0, 20, 10)]

        csv_path = tmp_path / "clip_1.csv"
        summary_path = tmp_path / "clip_1_summary.txt"
        writer = ResultWriter(str(csv_path), str(summary_path), include_region=True)
        source = MockFrameSource(frames)

        result = _engine(source, regions, writer).run()

        assert csv_path.read_text() == (
            "second,x,y,region\n"
            "0,2,2,Left\n"
            "1,2,2,Left\n"
            "2,2,2,Left\n"
            "5,2,2,Left\n"
            "6,42,2,Right\n"
            "7,22,32,\n"
        )
        assert result.timeline.runs == [Run("Left", 3), Run("Left", 1), Run("Right", 1), Run(None, 1)]
        assert result.timeline.region_seconds == {"Left": 4, "Right": 1}
        assert result.rows_written == 6
        assert result.unavailable_seconds == 1
        assert result.summary_path == str(summary_path)
        assert summary_path.read_text().splitlines() == [
            "=== TOTALS PER REGION ===",
            "centroid in region Left for 4 seconds",
            "centroid in region Right for 1 seconds",
            "",
            "=== MOVEMENT TIMELINE (contiguous runs while centroid detected) ===",
            "centroid in region Left for 3 seconds",
            "centroid in region Left for 1 seconds",
            "centroid in region Right for 1 seconds",
            "centroid not in any region for 1 seconds",
        ]
        assert source.closed

    def test_without_regions(self, tmp_path, frame_factory):
        frames = [frame_factory([(10, 10, 3, RED)]), frame_factory([])]
        writer = ResultWriter(str(tmp_path / "a.csv"), str(tmp_path / "a_summary.txt"))
        result = _engine(MockFrameSource(frames), writer=writer).run()

        assert (tmp_path / "a.csv").read_text() == "second,x,y\n0,11,11\n"
        assert result.summary_path is None
        assert not (tmp_path / "a_summary.txt").exists()
        assert result.regions_enabled is False

    def test_samples_without_writer(self, frame_factory):
        frames = [frame_factory([(0, 0, 2, RED)]), frame_factory([])]
        result = _engine(MockFrameSource(frames)).run()
        assert result.samples == [Sample(0, (0, 0), None), Sample(1)]
        assert result.csv_path is None

    def test_stop_between_seconds_keeps_partial_output(self, tmp_path, frame_factory):
        frames = [frame_factory([(0, 0, 5, RED)])] * 5
        csv_path = tmp_path / "p.csv"
        summary_path = tmp_path / "p_summary.txt"
        writer = ResultWriter(str(csv_path), str(summary_path), include_region=True)
        engine = _engine(MockFrameSource(frames), [Region("Left", 0, 0, 10, 10)], writer)

        def stop_after_second_one(sample):
            if sample.second == 1:
                engine.stop()
        engine.add_callback(stop_after_second_one)

        result = engine.run()

        assert result.interrupted is True
        assert csv_path.read_text() == "second,x,y,region\n0,2,2,Left\n1,2,2,Left\n"
        assert not summary_path.exists()
        assert result.timeline.runs == [Run("Left", 2)]

    def test_open_failure_writes_nothing(self, tmp_path):
        csv_path = tmp_path / "never.csv"
        writer = ResultWriter(str(csv_path))
        with pytest.raises(DecodeFailureError):
            _engine(MockFrameSource([], fail_open=True), writer=writer).run()
        assert not csv_path.exists()

    def test_malformed_frame_is_fatal(self, tmp_path):
        frames = [np.zeros((4, 4), dtype=np.uint8)]
        writer = ResultWriter(str(tmp_path / "bad.csv"))
        source = MockFrameSource(frames)
        with pytest.raises(InvalidInputError):
            _engine(source, writer=writer).run()
        assert writer.is_open is False
        assert source.closed
        assert not (tmp_path / "bad.csv").exists()

    def test_empty_source_writes_header_only(self, tmp_path):
        csv_path = tmp_path / "empty.csv"
        result = _engine(MockFrameSource([]), writer=ResultWriter(str(csv_path))).run()
        assert csv_path.read_text() == "second,x,y\n"
        assert result.rows_written == 0


class TestRunJob:
    def test_regions_mapping_and_backends_agree(self, frame_factory):
        frames = [
            frame_factory([(0, 0, 5, RED), (30, 30, 2, RED)]),
            frame_factory([(40, 20, 4, RED)]),
            frame_factory([]),
        ]
        regions = {"Left": {"x": 0, "y": 0, "width": 10, "height": 10}}

        dfs = run_job(MockFrameSource(frames), "FF0000", 30, regions=regions, backend="dfs")
        cv = run_job(MockFrameSource(frames), "FF0000", 30, regions=regions, backend="opencv")

        assert dfs.samples == cv.samples
        assert dfs.samples[0] == Sample(0, (2, 2), "Left")
        assert dfs.samples[1] == Sample(1, (41, 21), None)
        assert dfs.timeline.runs == [Run("Left", 1), Run(None, 1)]

    def test_invalid_color_rejected_before_opening(self):
        source = MockFrameSource([])
        with pytest.raises(InvalidInputError):
            run_job(source, "red", 30)
        assert source.requested == []

    def test_invalid_threshold_rejected(self):
        with pytest.raises(InvalidInputError):
            run_job(MockFrameSource([]), "FF0000", 300)

    def test_region_column_follows_loaded_regions(self, tmp_path):
        frame = np.zeros((3, 3, 3), dtype=np.uint8)
        frame[1, 1] = RED
        csv_path = tmp_path / "a.csv"
        summary_path = tmp_path / "a_summary.txt"
        regions = {"Left": {"x": 0, "y": 0, "width": 2, "height": 2}}

        result = run_job(
            MockFrameSource([frame, frame]), "FF0000", 30,
            regions=regions, writer=ResultWriter(str(csv_path), str(summary_path)),
        )

        assert csv_path.read_text() == "second,x,y,region\n0,1,1,Left\n1,1,1,Left\n"
        assert result.summary_path == str(summary_path)
        assert summary_path.read_text().splitlines()[:2] == [
            "=== TOTALS PER REGION ===",
            "centroid in region Left for 2 seconds",
        ]

    def test_no_region_column_without_regions(self, tmp_path):
        frame = np.zeros((3, 3, 3), dtype=np.uint8)
        frame[1, 1] = RED
        csv_path = tmp_path / "b.csv"
        summary_path = tmp_path / "b_summary.txt"
        writer = ResultWriter(str(csv_path), str(summary_path), include_region=True)

        result = run_job(MockFrameSource([frame]), "FF0000", 30, regions=None, writer=writer)

        assert csv_path.read_text() == "second,x,y\n0,1,1\n"
        assert result.summary_path is None
        assert not summary_path.exists()
