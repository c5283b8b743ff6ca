"""Regression detector for benchmark runs.

This module provides the RegressionDetector class, which compares each
result of a new run with the most recent historical value of its series.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from benchvault.core.exceptions import ConfigurationError
from benchvault.core.types import Direction
from benchvault.regression.models import RegressionResult, RegressionSignal, SignalKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from benchvault.core.types import BenchResult, ToolRun
    from benchvault.history import HistoryIndex

logger = logging.getLogger(__name__)

# Units with these suffixes measure time per operation (increase = regression)
LOWER_IS_BETTER_SUFFIXES: tuple[str, ...] = ("/op",)

DEFAULT_THRESHOLD_RATIO = 0.5


def resolve_direction(
    bench: BenchResult,
    lower_is_better_suffixes: Iterable[str] = LOWER_IS_BETTER_SUFFIXES,
) -> Direction:
    """Decide which way a result improves.

    An explicit ``direction`` on the result wins. Otherwise units ending in
    one of ``lower_is_better_suffixes`` are lower-is-better and every other
    unit is higher-is-better.

    Example:
        >>> resolve_direction(BenchResult(name="a", value=1.0, unit="ns/op"))
        <Direction.LOWER_IS_BETTER: 'lower_is_better'>
        >>> resolve_direction(BenchResult(name="a", value=1.0, unit="ops/s"))
        <Direction.HIGHER_IS_BETTER: 'higher_is_better'>
    """
    if bench.direction is not None:
        return bench.direction
    if any(bench.unit.endswith(suffix) for suffix in lower_is_better_suffixes):
        return Direction.LOWER_IS_BETTER
    return Direction.HIGHER_IS_BETTER


def change_ratio(value: float, baseline: float) -> float:
    """value / baseline, defined for a zero baseline."""
    if baseline == 0:
        if value == 0:
            return 1.0
        return math.copysign(math.inf, value)
    return value / baseline


def classify(value: float, baseline: float, direction: Direction, threshold_ratio: float) -> SignalKind:
    """Classify a value against its baseline.

    The stable band runs between ``baseline*(1-t)`` and ``baseline*(1+t)``,
    bounds included, whatever the sign of the baseline.
    """
    bounds = (baseline * (1 - threshold_ratio), baseline * (1 + threshold_ratio))
    lower, upper = min(bounds), max(bounds)
    if direction is Direction.LOWER_IS_BETTER:
        if value > upper:
            return SignalKind.REGRESSED
        if value < lower:
            return SignalKind.IMPROVED
    else:
        if value < lower:
            return SignalKind.REGRESSED
        if value > upper:
            return SignalKind.IMPROVED
    return SignalKind.STABLE


def validate_threshold(threshold_ratio: float) -> float:
    """Check a threshold ratio is finite and non-negative.

    Raises:
        ConfigurationError: If it is not.
    """
    if not math.isfinite(threshold_ratio) or threshold_ratio < 0:
        raise ConfigurationError(f"threshold_ratio must be a finite number >= 0, got {threshold_ratio}")
    return threshold_ratio


class RegressionDetector:
    """Detect regressions of a new run against the history index.

    Attributes:
        threshold_ratio: Relative deviation tolerated around the baseline.
        lower_is_better_suffixes: Unit suffixes treated as lower-is-better.

    Example:
        >>> detector = RegressionDetector(threshold_ratio=0.5)
        >>> result = detector.detect(HistoryIndex.build(store), "Benchmark", run)
        >>> for signal in result.regressions:
        ...     print(signal.message)
    """

    def __init__(
        self,
        threshold_ratio: float = DEFAULT_THRESHOLD_RATIO,
        lower_is_better_suffixes: Iterable[str] = LOWER_IS_BETTER_SUFFIXES,
    ) -> None:
        """Initialize detector.

        Args:
            threshold_ratio: Relative deviation tolerated, e.g. 0.5 for 50%.
            lower_is_better_suffixes: Unit suffixes treated as lower-is-better.

        Raises:
            ConfigurationError: If threshold_ratio is negative or not finite.
        """
        self.threshold_ratio = validate_threshold(threshold_ratio)
        self.lower_is_better_suffixes = tuple(lower_is_better_suffixes)

    def compare(self, index: HistoryIndex, suite: str, bench: BenchResult, run: ToolRun) -> RegressionSignal:
        """Compare a single result of ``run`` with its baseline."""
        direction = resolve_direction(bench, self.lower_is_better_suffixes)
        baseline = index.baseline(suite, bench.name, exclude_commit=run.commit)
        if baseline is None:
            return RegressionSignal(
                suite=suite,
                bench=bench.name,
                unit=bench.unit,
                kind=SignalKind.NEW_SERIES,
                current_value=bench.value,
                direction=direction,
                threshold_ratio=self.threshold_ratio,
            )

        if baseline.unit != bench.unit:
            logger.warning(f"{suite}/{bench.name}: unit changed from {baseline.unit!r} to {bench.unit!r}")

        return RegressionSignal(
            suite=suite,
            bench=bench.name,
            unit=bench.unit,
            kind=classify(bench.value, baseline.value, direction, self.threshold_ratio),
            current_value=bench.value,
            direction=direction,
            ratio=change_ratio(bench.value, baseline.value),
            baseline_value=baseline.value,
            baseline_commit=baseline.commit.id,
            threshold_ratio=self.threshold_ratio,
        )

    def detect(self, index: HistoryIndex, suite: str, run: ToolRun) -> RegressionResult:
        """Detect regressions of every result in ``run``.

        Args:
            index: History of the store the run will be appended to.
            suite: Suite the run belongs to.
            run: The new run.

        Returns:
            RegressionResult with one signal per bench result.
        """
        signals = [self.compare(index, suite, bench, run) for bench in run.benches]
        return RegressionResult(signals=signals, threshold_ratio=self.threshold_ratio)


def detect(
    index: HistoryIndex,
    suite: str,
    run: ToolRun,
    threshold_ratio: float = DEFAULT_THRESHOLD_RATIO,
) -> RegressionResult:
    """Detect regressions with the default unit convention.

    Shorthand for ``RegressionDetector(threshold_ratio).detect(index, suite, run)``.
    """
    return RegressionDetector(threshold_ratio=threshold_ratio).detect(index, suite, run)
