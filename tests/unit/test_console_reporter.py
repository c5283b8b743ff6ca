"""Tests for console reporter."""

from __future__ import annotations

import math
from io import StringIO

import pytest

from benchvault.core.exceptions import DecodeError, DecodeErrorKind
from benchvault.core.types import Direction
from benchvault.engine import AppendReport
from benchvault.regression.models import RegressionResult, RegressionSignal, SignalKind
from benchvault.reporters.console import (
    Colors,
    ConsoleReporter,
    _format_ratio,
    _supports_color,
)


def make_signal(bench: str, kind: SignalKind, current: float, baseline: float | None = None) -> RegressionSignal:
    """Signal of a ns/op bench."""
    return RegressionSignal(
        suite="Benchmark",
        bench=bench,
        unit="ns/op",
        kind=kind,
        current_value=current,
        direction=Direction.LOWER_IS_BETTER,
        ratio=None if baseline is None else current / baseline,
        baseline_value=baseline,
        baseline_commit=None if baseline is None else "46f1a97",
        threshold_ratio=0.5,
    )


@pytest.fixture
def append_report() -> AppendReport:
    """Report with one signal of each kind."""
    signals = [
        make_signal("jox.ChainedBenchmark.channelChain", SignalKind.REGRESSED, 160.0, 100.0),
        make_signal("jox.RendezvousBenchmark.exchanger", SignalKind.IMPROVED, 40.0, 100.0),
        make_signal("jox.RendezvousBenchmark.channel", SignalKind.STABLE, 101.0, 100.0),
        make_signal("jox.BufferedBenchmark.array_blocking_queue", SignalKind.NEW_SERIES, 1224.47),
    ]
    return AppendReport(
        suite="Benchmark",
        result=RegressionResult(signals=signals, threshold_ratio=0.5),
        new_store_size=3,
    )


class TestConsoleReporterInit:
    """Tests for ConsoleReporter initialization."""

    def test_default_values(self) -> None:
        """Output stream is kept; StringIO disables colors."""
        output = StringIO()
        reporter = ConsoleReporter(output=output)

        assert reporter.output is output
        assert reporter.use_colors is False

    def test_colors_disabled(self) -> None:
        """Colors can be disabled."""
        reporter = ConsoleReporter(use_colors=False, output=StringIO())

        assert reporter.use_colors is False


class TestConsoleReporterReport:
    """Tests for append report output."""

    @pytest.fixture
    def output(self) -> StringIO:
        """Output buffer."""
        return StringIO()

    @pytest.fixture
    def reporter(self, output: StringIO) -> ConsoleReporter:
        """Reporter with colors disabled for testing."""
        return ConsoleReporter(use_colors=False, output=output)

    def test_table(self, reporter: ConsoleReporter, output: StringIO, append_report: AppendReport) -> None:
        """Every signal gets a row with status, values and ratio."""
        reporter.report(append_report)
        result = output.getvalue()

        assert "Benchmark: 4 results" in result
        assert "jox.ChainedBenchmark.channelChain" in result
        assert "1.60x" in result
        assert "0.40x" in result
        assert "new" in result
        assert "❌" in result
        assert "✅" in result
        assert "Regressed: 1  Improved: 1  Stable: 1  New: 1  (threshold 50.0%)" in result
        assert "Store now holds 3 runs" in result
        assert "1 regression(s) detected" in result

    def test_rows_aligned(self, reporter: ConsoleReporter, output: StringIO, append_report: AppendReport) -> None:
        """All table lines have the same width."""
        reporter.report(append_report)
        lines = [line for line in output.getvalue().splitlines() if line.startswith("  │") or line.startswith("  ┌")]

        assert len({len(line.replace("❌", "x").replace("✅", "v")) for line in lines}) == 1

    def test_no_regressions(self, reporter: ConsoleReporter, output: StringIO) -> None:
        """A clean run ends with a success line."""
        report = AppendReport(
            suite="Benchmark",
            result=RegressionResult(
                signals=[make_signal("a", SignalKind.STABLE, 100.0, 100.0)], threshold_ratio=0.5
            ),
            new_store_size=2,
        )

        reporter.report(report)

        assert "No regressions detected" in output.getvalue()

    def test_empty_run(self, reporter: ConsoleReporter, output: StringIO) -> None:
        """A run without results prints a placeholder."""
        report = AppendReport(
            suite="Benchmark",
            result=RegressionResult(signals=[], threshold_ratio=0.5),
            new_store_size=1,
        )

        reporter.report(report)

        assert "No results in run." in output.getvalue()

    def test_warnings_and_skipped(self, reporter: ConsoleReporter, output: StringIO) -> None:
        """Skipped runs and anomalies are listed as warnings."""
        report = AppendReport(
            suite="Benchmark",
            result=RegressionResult(signals=[], threshold_ratio=0.5),
            new_store_size=1,
            skipped_entries=[DecodeError("date: Field required", DecodeErrorKind.MALFORMED_ENTRY, "Benchmark", 4)],
            warnings=["Benchmark: commit abc is already recorded, appending a re-run"],
        )

        reporter.report(report)
        result = output.getvalue()

        assert "⚠️  Skipped malformed run Benchmark[4]: date: Field required" in result
        assert "already recorded" in result

    def test_colors(self, append_report: AppendReport) -> None:
        """Colored output wraps the ratio in the status color."""
        output = StringIO()
        reporter = ConsoleReporter(output=output)
        reporter.use_colors = True

        reporter.report(append_report)

        assert Colors.RED in output.getvalue()
        assert Colors.RESET in output.getvalue()

    def test_print_helpers(self, reporter: ConsoleReporter, output: StringIO) -> None:
        """Message helpers include their markers."""
        reporter.print_header("Header")
        reporter.print_success("done")
        reporter.print_warning("careful")
        reporter.print_error("failed")
        reporter.print_info("details")
        result = output.getvalue()

        assert "Header" in result
        assert "=" * 50 in result
        assert "✅ done" in result
        assert "⚠️  careful" in result
        assert "❌ failed" in result
        assert "[i] details" in result


class TestFormatRatio:
    """Tests for ratio formatting."""

    @pytest.mark.parametrize(
        ("ratio", "expected"),
        [(None, "new"), (math.inf, "inf"), (1.6, "1.60x"), (0.4, "0.40x")],
    )
    def test_format(self, ratio: float | None, expected: str) -> None:
        """Ratios are shown with two decimals."""
        assert _format_ratio(ratio) == expected


class TestSupportsColor:
    """Tests for color support detection."""

    def test_stringio_no_color(self) -> None:
        """StringIO does not support colors."""
        assert _supports_color(StringIO()) is False

    def test_no_isatty_attribute(self) -> None:
        """Object without isatty returns False."""

        class FakeStream:
            pass

        assert _supports_color(FakeStream()) is False  # type: ignore[arg-type]

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """NO_COLOR disables colors on a TTY."""

        class TTY(StringIO):
            def isatty(self) -> bool:
                return True

        monkeypatch.setenv("NO_COLOR", "1")
        assert _supports_color(TTY()) is False

        monkeypatch.delenv("NO_COLOR")
        monkeypatch.setenv("TERM", "xterm")
        assert _supports_color(TTY()) is True
