"""In-memory index over a store's history.

The index is derived from a loaded Store on every append and never
persisted, so the store stays the single source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from benchvault.core.types import Commit, Direction, Store


@dataclass(frozen=True)
class HistoryPoint:
    """One historical observation of a series.

    Attributes:
        commit: Commit the value was measured at.
        value: Measured value.
        unit: Unit label of the measurement.
        date: Epoch millis when the run was recorded.
        direction: Explicit direction recorded with the value, if any.
    """

    commit: Commit
    value: float
    unit: str
    date: int
    direction: Direction | None = None


class HistoryIndex:
    """Lookup of historical values per (suite, bench name) series.

    Series are ordered chronologically by commit time, ties broken by the
    run's recording date and then by append order.

    Example:
        >>> index = HistoryIndex.build(store)
        >>> points = index.lookup("Benchmark", "jox.RendezvousBenchmark.channel")
        >>> points[-1].value
        171.051063156146
    """

    def __init__(self, series: dict[tuple[str, str], list[HistoryPoint]] | None = None) -> None:
        self._series: dict[tuple[str, str], list[HistoryPoint]] = series or {}

    @classmethod
    def build(cls, store: Store) -> HistoryIndex:
        """Build the index in one pass over every run of the store.

        Args:
            store: A validated store.

        Returns:
            The index.
        """
        keyed: dict[tuple[str, str], list[tuple[float, int, HistoryPoint]]] = {}
        for suite, runs in store.entries.items():
            for run in runs:
                epoch = run.commit.epoch_seconds
                for bench in run.benches:
                    point = HistoryPoint(
                        commit=run.commit,
                        value=bench.value,
                        unit=bench.unit,
                        date=run.date,
                        direction=bench.direction,
                    )
                    keyed.setdefault(bench.series_key(suite), []).append((epoch, run.date, point))

        series: dict[tuple[str, str], list[HistoryPoint]] = {}
        for key, items in keyed.items():
            # sort() is stable: equal keys keep append order
            items.sort(key=lambda item: (item[0], item[1]))
            series[key] = [point for _, _, point in items]
        return cls(series)

    def lookup(self, suite: str, bench_name: str) -> list[HistoryPoint]:
        """Historical points of a series, oldest first.

        An unknown series yields an empty list.
        """
        return list(self._series.get((suite, bench_name), ()))

    def baseline(
        self,
        suite: str,
        bench_name: str,
        exclude_commit: Commit | None = None,
    ) -> HistoryPoint | None:
        """Most recent point of a series.

        Args:
            suite: Suite name.
            bench_name: Bench name, parameter suffix included.
            exclude_commit: Skip points measured at this commit, so a re-run
                is compared with the previous commit rather than itself.

        Returns:
            The baseline point, or None when the series has no usable history.
        """
        for point in reversed(self._series.get((suite, bench_name), ())):
            if exclude_commit is None or point.commit != exclude_commit:
                return point
        return None

    def suites(self) -> list[str]:
        """Suite names with at least one series, sorted."""
        return sorted({suite for suite, _ in self._series})

    def series_names(self, suite: str) -> list[str]:
        """Bench names observed under a suite, sorted."""
        return sorted(name for key_suite, name in self._series if key_suite == suite)

    def __len__(self) -> int:
        """Return the number of series."""
        return len(self._series)

    def __contains__(self, key: object) -> bool:
        return key in self._series
