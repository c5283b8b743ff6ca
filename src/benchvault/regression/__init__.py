"""Regression detection module for benchvault.

This module compares a new benchmark run with the history of each of its
series and classifies every result as regressed, improved, stable or new.

Example:
    >>> from benchvault.history import HistoryIndex
    >>> from benchvault.regression import RegressionDetector
    >>>
    >>> detector = RegressionDetector(threshold_ratio=0.25)
    >>> result = detector.detect(HistoryIndex.build(store), "Benchmark", run)
    >>> if result.has_regressions:
    ...     print(result.summary())
"""

from __future__ import annotations

from benchvault.regression.detector import (
    DEFAULT_THRESHOLD_RATIO,
    LOWER_IS_BETTER_SUFFIXES,
    RegressionDetector,
    change_ratio,
    classify,
    detect,
    resolve_direction,
)
from benchvault.regression.models import RegressionResult, RegressionSignal, SignalKind

__all__ = [
    "DEFAULT_THRESHOLD_RATIO",
    "LOWER_IS_BETTER_SUFFIXES",
    "RegressionDetector",
    "RegressionResult",
    "RegressionSignal",
    "SignalKind",
    "change_ratio",
    "classify",
    "detect",
    "resolve_direction",
]
