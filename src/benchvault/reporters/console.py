"""Console reporter for benchvault.

This module provides terminal output for append reports,
with colored tables and status indicators.
"""

from __future__ import annotations

import math
import os
import sys
from typing import TYPE_CHECKING, TextIO

from benchvault.regression.models import SignalKind

if TYPE_CHECKING:
    from benchvault.engine import AppendReport
    from benchvault.regression.models import RegressionSignal


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Status colors
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


STATUS: dict[SignalKind, tuple[str, str]] = {
    SignalKind.REGRESSED: ("❌", Colors.RED),
    SignalKind.IMPROVED: ("✅", Colors.GREEN),
    SignalKind.STABLE: ("=", Colors.DIM),
    SignalKind.NEW_SERIES: ("+", Colors.BLUE),
}


class ConsoleReporter:
    """Reporter that outputs append reports to the terminal.

    Attributes:
        use_colors: Whether to use ANSI colors in output.
        output: Output stream (defaults to stdout).

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.report(append_report)
        ┌────┬──────────────────────────────────┬──────────┬──────────┬───────┐
        │    │ Benchmark                        │ Baseline │ Current  │ Ratio │
        ├────┼──────────────────────────────────┼──────────┼──────────┼───────┤
        │ ❌ │ jox.ChainedBenchmark.channel     │ 100      │ 160      │ 1.60x │
        └────┴──────────────────────────────────┴──────────┴──────────┴───────┘
    """

    def __init__(
        self,
        use_colors: bool = True,
        output: TextIO | None = None,
    ) -> None:
        """Initialize ConsoleReporter.

        Args:
            use_colors: Whether to use ANSI colors. Defaults to True.
            output: Output stream. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout
        self.use_colors = use_colors and _supports_color(self.output)

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_colors:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _print(self, text: str = "") -> None:
        """Print text to output stream."""
        print(text, file=self.output)

    def report(self, report: AppendReport) -> None:
        """Report the outcome of an append.

        Args:
            report: The append report.
        """
        result = report.result
        self.print_header(f"{report.suite}: {len(result.signals)} results")
        self._print_signal_table(result.signals)

        counts = result.counts()
        self._print(
            f"  Regressed: {counts['regressed']}  Improved: {counts['improved']}  "
            f"Stable: {counts['stable']}  New: {counts['new_series']}  "
            f"(threshold {result.threshold_ratio * 100:.1f}%)"
        )
        self.print_info(f"Store now holds {report.new_store_size} runs")

        for error in report.skipped_entries:
            self.print_warning(f"Skipped malformed run {error}")
        for warning in report.warnings:
            self.print_warning(warning)

        if result.has_regressions:
            self.print_error(f"{len(result.regressions)} regression(s) detected")
        else:
            self.print_success("No regressions detected")
        self._print()

    def _print_signal_table(self, signals: list[RegressionSignal]) -> None:
        """Print a table of signals.

        Args:
            signals: Signals to list, in run order.
        """
        if not signals:
            self._print("  No results in run.")
            return

        col1_width = 4
        col2_width = max(len(" Benchmark "), *(len(s.bench) + 2 for s in signals))
        col3_width = 12
        col4_width = 12
        col5_width = 9
        widths = (col1_width, col2_width, col3_width, col4_width, col5_width)

        horizontal = "─"
        vertical = "│"

        def border(left: str, middle: str, right: str) -> str:
            return "  " + left + middle.join(horizontal * width for width in widths) + right

        self._print(border("┌", "┬", "┐"))
        headers = ("", "Benchmark", "Baseline", "Current", "Ratio")
        self._print(
            "  " + vertical + vertical.join(f" {h:<{w - 1}}" for h, w in zip(headers, widths)) + vertical
        )
        self._print(border("├", "┼", "┤"))

        for signal in signals:
            symbol, color = STATUS[signal.kind]
            baseline = "-" if signal.baseline_value is None else f"{signal.baseline_value:.4g}"
            ratio = _format_ratio(signal.ratio)
            padded_ratio = f" {ratio:<{col5_width - 1}}"
            self._print(
                f"  {vertical} {symbol:<{col1_width - 2}} "
                f"{vertical} {signal.bench:<{col2_width - 2}} "
                f"{vertical} {baseline:<{col3_width - 2}} "
                f"{vertical} {signal.current_value:<{col4_width - 2}.4g} "
                f"{vertical}{self._color(padded_ratio, color)}"
                f"{vertical}"
            )

        self._print(border("└", "┴", "┘"))
        self._print()

    def print_header(self, text: str) -> None:
        """Print a section header.

        Args:
            text: Header text to display.
        """
        self._print()
        self._print(self._color(f"{'=' * 50}", Colors.DIM))
        self._print(self._color(f"  {text}", Colors.BOLD + Colors.CYAN))
        self._print(self._color(f"{'=' * 50}", Colors.DIM))

    def print_success(self, text: str) -> None:
        """Print a success message."""
        self._print(self._color(f"  ✅ {text}", Colors.GREEN))

    def print_warning(self, text: str) -> None:
        """Print a warning message."""
        self._print(self._color(f"  ⚠️  {text}", Colors.YELLOW))

    def print_error(self, text: str) -> None:
        """Print an error message."""
        self._print(self._color(f"  ❌ {text}", Colors.RED))

    def print_info(self, text: str) -> None:
        """Print an info message."""
        self._print(self._color(f"  [i] {text}", Colors.BLUE))


def _format_ratio(ratio: float | None) -> str:
    if ratio is None:
        return "new"
    if math.isinf(ratio):
        return "inf"
    return f"{ratio:.2f}x"


def _supports_color(stream: TextIO) -> bool:
    """Check if the output stream supports ANSI colors.

    Args:
        stream: Output stream to check.

    Returns:
        True if colors are supported, False otherwise.
    """
    # Check if stream is a TTY
    if not hasattr(stream, "isatty"):
        return False
    if not stream.isatty():
        return False

    # Check for common environment variables that disable color
    if os.environ.get("NO_COLOR"):
        return False

    return os.environ.get("TERM") != "dumb"
