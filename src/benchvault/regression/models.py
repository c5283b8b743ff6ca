"""Models for regression detection.

This module provides dataclasses for regression signals and the
result of comparing one run against its history.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from benchvault.core.types import Direction


class SignalKind(str, Enum):
    """Classification of one result against its baseline."""

    NEW_SERIES = "new_series"
    REGRESSED = "regressed"
    IMPROVED = "improved"
    STABLE = "stable"


@dataclass(frozen=True)
class RegressionSignal:
    """Outcome of comparing one bench result with its baseline.

    Attributes:
        suite: Suite the result belongs to.
        bench: Bench name, parameter suffix included.
        unit: Unit label of the new value.
        kind: Classification of the change.
        current_value: The new value.
        direction: Direction used for the comparison.
        ratio: current_value / baseline_value (None for a new series).
        baseline_value: Value the result was compared with (None for a new series).
        baseline_commit: Commit hash of the baseline (None for a new series).
        threshold_ratio: Threshold used for the comparison.

    Example:
        >>> signal = RegressionSignal(
        ...     suite="Benchmark",
        ...     bench="jox.ChainedBenchmark.channelChain",
        ...     unit="ns/op",
        ...     kind=SignalKind.REGRESSED,
        ...     current_value=160.0,
        ...     direction=Direction.LOWER_IS_BETTER,
        ...     ratio=1.6,
        ...     baseline_value=100.0,
        ...     baseline_commit="46f1a97",
        ...     threshold_ratio=0.5,
        ... )
        >>> signal.message
        'jox.ChainedBenchmark.channelChain regressed: 100 -> 160 ns/op (1.60x, threshold: 50.0%)'
    """

    suite: str
    bench: str
    unit: str
    kind: SignalKind
    current_value: float
    direction: Direction
    ratio: float | None = None
    baseline_value: float | None = None
    baseline_commit: str | None = None
    threshold_ratio: float = 0.0

    @property
    def change_percent(self) -> float | None:
        """Relative change from baseline in percent (None for a new series)."""
        if self.ratio is None or math.isinf(self.ratio):
            return None
        return (self.ratio - 1.0) * 100

    @property
    def message(self) -> str:
        """Human-readable description of the signal."""
        if self.kind is SignalKind.NEW_SERIES:
            return f"{self.bench}: new series ({self.current_value:g} {self.unit})"

        ratio = "inf" if self.ratio is None or math.isinf(self.ratio) else f"{self.ratio:.2f}x"
        return (
            f"{self.bench} {self.kind.value}: {self.baseline_value:g} -> {self.current_value:g} {self.unit} "
            f"({ratio}, threshold: {self.threshold_ratio * 100:.1f}%)"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert signal to dictionary for serialization."""
        ratio = self.ratio
        if ratio is not None and math.isinf(ratio):
            ratio = None
        return {
            "suite": self.suite,
            "bench": self.bench,
            "unit": self.unit,
            "kind": self.kind.value,
            "direction": self.direction.value,
            "current_value": self.current_value,
            "baseline_value": self.baseline_value,
            "baseline_commit": self.baseline_commit,
            "ratio": ratio,
            "threshold_ratio": self.threshold_ratio,
        }


@dataclass
class RegressionResult:
    """Result of regression detection for one run.

    Attributes:
        signals: One signal per bench result, in run order.
        threshold_ratio: Threshold used for the comparison.
        timestamp: When the detection was performed.

    Example:
        >>> result = detector.detect(index, "Benchmark", run)
        >>> if result.has_regressions:
        ...     print(result.summary())
    """

    signals: list[RegressionSignal]
    threshold_ratio: float
    timestamp: datetime = field(default_factory=datetime.now)

    def _of_kind(self, kind: SignalKind) -> list[RegressionSignal]:
        return [signal for signal in self.signals if signal.kind is kind]

    @property
    def regressions(self) -> list[RegressionSignal]:
        """Signals classified as regressed."""
        return self._of_kind(SignalKind.REGRESSED)

    @property
    def improvements(self) -> list[RegressionSignal]:
        """Signals classified as improved."""
        return self._of_kind(SignalKind.IMPROVED)

    @property
    def stable(self) -> list[RegressionSignal]:
        """Signals within the threshold."""
        return self._of_kind(SignalKind.STABLE)

    @property
    def new_series(self) -> list[RegressionSignal]:
        """Signals for results without history."""
        return self._of_kind(SignalKind.NEW_SERIES)

    @property
    def has_regressions(self) -> bool:
        """Check if any regressions were detected."""
        return any(signal.kind is SignalKind.REGRESSED for signal in self.signals)

    def counts(self) -> dict[str, int]:
        """Number of signals per kind."""
        return {kind.value: len(self._of_kind(kind)) for kind in SignalKind}

    def summary(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line summary string.
        """
        if not self.has_regressions:
            return "No regressions detected."

        counts = self.counts()
        lines = [
            f"Regression Detection Summary ({self.timestamp.strftime('%Y-%m-%d %H:%M:%S')})",
            f"  Regressed: {counts['regressed']}, Improved: {counts['improved']}, "
            f"Stable: {counts['stable']}, New: {counts['new_series']}",
            "",
            "Regressions:",
        ]
        for signal in self.regressions:
            lines.append(f"  [REGRESSED] {signal.message}")

        return "\n".join(lines)
