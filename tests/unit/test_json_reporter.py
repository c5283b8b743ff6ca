"""Tests for JSON reporter."""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import pytest

from benchvault.core.types import Direction
from benchvault.engine import AppendReport
from benchvault.regression.models import RegressionResult, RegressionSignal, SignalKind
from benchvault.reporters.json import JSONReporter

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def append_report() -> AppendReport:
    """Report with a regression and a new series."""
    signals = [
        RegressionSignal(
            suite="Benchmark",
            bench="jox.ChainedBenchmark.channelChain",
            unit="ns/op",
            kind=SignalKind.REGRESSED,
            current_value=160.0,
            direction=Direction.LOWER_IS_BETTER,
            ratio=1.6,
            baseline_value=100.0,
            baseline_commit="46f1a97238cea53733e55d665c97045b9806e49d",
            threshold_ratio=0.5,
        ),
        RegressionSignal(
            suite="Benchmark",
            bench="jox.ChainedBenchmark.zero",
            unit="ns/op",
            kind=SignalKind.REGRESSED,
            current_value=1.0,
            direction=Direction.LOWER_IS_BETTER,
            ratio=math.inf,
            baseline_value=0.0,
            baseline_commit="46f1a97238cea53733e55d665c97045b9806e49d",
            threshold_ratio=0.5,
        ),
        RegressionSignal(
            suite="Benchmark",
            bench="jox.BufferedBenchmark.fresh",
            unit="ns/op",
            kind=SignalKind.NEW_SERIES,
            current_value=42.0,
            direction=Direction.LOWER_IS_BETTER,
            threshold_ratio=0.5,
        ),
    ]
    return AppendReport(
        suite="Benchmark",
        result=RegressionResult(signals=signals, threshold_ratio=0.5),
        new_store_size=7,
        warnings=["Benchmark: run date 1 is older than the last recorded run (2), appending out of order"],
    )


class TestJSONReporterInit:
    """Tests for JSONReporter initialization."""

    def test_default_values(self) -> None:
        """Default indent is 2."""
        assert JSONReporter().indent == 2

    def test_compact_output(self, append_report: AppendReport) -> None:
        """indent=None gives a single line."""
        assert "\n" not in JSONReporter(indent=None).report(append_report)


class TestJSONReporterReport:
    """Tests for report output."""

    @pytest.fixture
    def reporter(self) -> JSONReporter:
        """Default reporter."""
        return JSONReporter()

    def test_valid_json(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Output parses as JSON."""
        data = json.loads(reporter.report(append_report))

        assert data["suite"] == "Benchmark"
        assert data["new_store_size"] == 7
        assert data["has_regressions"] is True
        assert data["threshold_ratio"] == 0.5

    def test_contains_timestamp(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Output is timestamped in UTC."""
        data = json.loads(reporter.report(append_report))
        assert data["generated_at"].endswith("+00:00")

    def test_clock(self, append_report: AppendReport) -> None:
        """The generation time comes from the clock."""
        reporter = JSONReporter(clock=lambda: datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        assert reporter.to_dict(append_report)["generated_at"] == "2024-01-15T10:30:00+00:00"

    def test_status(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Status summarizes the outcome."""
        assert reporter.to_dict(append_report)["status"] == "regressed"
        append_report.result.signals.clear()
        assert reporter.to_dict(append_report)["status"] == "ok"

    def test_signals(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Signals keep run order and infinite ratios become null."""
        signals = json.loads(reporter.report(append_report))["signals"]

        assert [s["kind"] for s in signals] == ["regressed", "regressed", "new_series"]
        assert signals[0]["ratio"] == 1.6
        assert signals[0]["baseline_commit"] == "46f1a97238cea53733e55d665c97045b9806e49d"
        assert signals[1]["ratio"] is None
        assert signals[2]["baseline_value"] is None

    def test_counts_and_warnings(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Counts per kind and warnings are included."""
        data = json.loads(reporter.report(append_report))

        assert data["counts"] == {"new_series": 1, "regressed": 2, "improved": 0, "stable": 0}
        assert len(data["warnings"]) == 1
        assert data["skipped_entries"] == []

    def test_metadata(self, reporter: JSONReporter, append_report: AppendReport) -> None:
        """Metadata is included, empty by default."""
        assert json.loads(reporter.report(append_report))["metadata"] == {}

        data = json.loads(reporter.report(append_report, metadata={"run_id": "42"}))
        assert data["metadata"] == {"run_id": "42"}


class TestJSONReporterFile:
    """Tests for report_to_file."""

    def test_writes_file(self, append_report: AppendReport, tmp_path: Path) -> None:
        """The report is written to the path, creating directories."""
        path = tmp_path / "reports" / "bench.json"
        assert JSONReporter().report_to_file(append_report, path) == path

        assert json.loads(path.read_text())["suite"] == "Benchmark"

    def test_accepts_string_path(self, append_report: AppendReport, tmp_path: Path) -> None:
        """String paths are accepted."""
        path = tmp_path / "bench.json"
        JSONReporter().report_to_file(append_report, str(path))

        assert path.exists()
