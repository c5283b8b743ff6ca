"""High-level API for appending benchmark runs.

This module provides AppendEngine, the only component that writes a store.
An append loads the store, compares the new run with its history, merges it
and persists the result, all under the store lock.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from benchvault.core.config import Settings, load_settings
from benchvault.core.exceptions import DecodeError, ValidationError
from benchvault.core.types import Store, ToolRun
from benchvault.history import HistoryIndex
from benchvault.regression.detector import RegressionDetector, validate_threshold
from benchvault.storage.codec import describe_validation_error
from benchvault.storage.json_store import JSONFileStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from benchvault.regression.models import RegressionResult, RegressionSignal
    from benchvault.storage.base import StorageProtocol

logger = logging.getLogger(__name__)


class AppendState(str, Enum):
    """Stages of an append."""

    LOADING = "loading"
    DETECTING = "detecting"
    MERGING = "merging"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AppendReport:
    """Outcome of a successful append.

    Attributes:
        suite: Suite the run was appended to.
        result: Regression signals of the appended run.
        new_store_size: Total number of runs in the store after the append.
        skipped_entries: Malformed runs dropped while loading the store.
        warnings: Non-fatal anomalies (out-of-order dates, re-runs).
    """

    suite: str
    result: RegressionResult
    new_store_size: int
    skipped_entries: list[DecodeError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def signals(self) -> list[RegressionSignal]:
        """One signal per bench result of the appended run."""
        return self.result.signals

    @property
    def has_regressions(self) -> bool:
        """Check if the appended run regressed anywhere."""
        return self.result.has_regressions

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "suite": self.suite,
            "new_store_size": self.new_store_size,
            "threshold_ratio": self.result.threshold_ratio,
            "has_regressions": self.has_regressions,
            "counts": self.result.counts(),
            "signals": [signal.to_dict() for signal in self.signals],
            "skipped_entries": [
                {"tool": error.tool, "index": error.index, "error": str(error)} for error in self.skipped_entries
            ],
            "warnings": list(self.warnings),
        }


def _now_millis() -> int:
    return int(time.time() * 1000)


def _bench_name(benches: Any, index: Any) -> str | None:
    # Resolve the bench named by a pydantic error location, raw or validated.
    if not isinstance(index, int) or not isinstance(benches, (list, tuple)) or not 0 <= index < len(benches):
        return None
    bench = benches[index]
    name = bench.get("name") if isinstance(bench, Mapping) else getattr(bench, "name", None)
    return name if isinstance(name, str) and name else f"benches[{index}]"


def _validation_error(error: PydanticValidationError, suite: str, benches: Any) -> ValidationError:
    bench = None
    for detail in error.errors():
        location = detail["loc"]
        if len(location) >= 2 and location[0] == "benches":
            bench = _bench_name(benches, location[1])
            break
    return ValidationError(describe_validation_error(error), suite=suite, bench=bench)


def coerce_run(run: ToolRun | Mapping[str, Any], suite: str) -> ToolRun:
    """Turn a run payload into a ToolRun.

    Args:
        run: A ToolRun or a mapping in the persisted run shape.
        suite: Suite name, for error context.

    Raises:
        ValidationError: If the payload does not describe a valid run.
    """
    if isinstance(run, ToolRun):
        return run
    if not isinstance(run, Mapping):
        raise ValidationError(f"run must be an object, got {type(run).__name__}", suite=suite)
    try:
        return ToolRun.model_validate(dict(run))
    except PydanticValidationError as e:
        raise _validation_error(e, suite, run.get("benches")) from e


def validate_run(run: ToolRun, suite: str) -> ToolRun:
    """Re-check every record invariant of ``run``.

    Runs built with ``model_construct`` skip validation; this catches them
    before anything is merged.

    Raises:
        ValidationError: Naming the suite and offending bench.
    """
    try:
        return ToolRun.model_validate(run.model_dump(mode="python", exclude_unset=True))
    except PydanticValidationError as e:
        raise _validation_error(e, suite, run.benches) from e


class AppendEngine:
    """Append benchmark runs to a store with regression detection.

    Every append holds the store lock from loading to persisting, so
    concurrent appends to the same store are serialized and none is lost.

    Attributes:
        state: Stage of the most recent append (None before the first).

    Example:
        >>> engine = AppendEngine("benchmark-data/data.js")
        >>> report = engine.append("Benchmark", run, threshold_ratio=0.25)
        >>> for signal in report.result.regressions:
        ...     print(signal.message)
    """

    def __init__(
        self,
        store: StorageProtocol | str | Path | None = None,
        settings: Settings | None = None,
        lock_timeout: float | None = None,
        threshold_ratio: float | None = None,
        strict: bool = False,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize with a storage backend.

        Args:
            store: Backend or path to a store file (default: settings.store_path).
            settings: Settings (default: loaded from the environment).
            lock_timeout: Lock wait in seconds (default: settings.lock_timeout_seconds).
            threshold_ratio: Default threshold (default: settings.threshold_ratio).
            strict: Refuse to append when the store has malformed runs instead
                of dropping them.
            clock: Returns the current time in epoch millis.

        Raises:
            ConfigurationError: If the threshold or the environment settings are invalid.
        """
        self.settings = settings or load_settings()
        if store is None:
            store = self.settings.store_path
        if isinstance(store, (str, Path)):
            store = JSONFileStore(
                store,
                js_variable=self.settings.js_variable,
                lock_timeout=self.settings.lock_timeout_seconds,
                lock_poll_interval=self.settings.lock_poll_interval_seconds,
            )
        self._store: StorageProtocol = store
        self._lock_timeout = self.settings.lock_timeout_seconds if lock_timeout is None else lock_timeout
        self._threshold_ratio = validate_threshold(
            self.settings.threshold_ratio if threshold_ratio is None else threshold_ratio
        )
        self._strict = strict
        self._clock = clock or _now_millis
        self.state: AppendState | None = None

    @property
    def store(self) -> StorageProtocol:
        """The storage backend."""
        return self._store

    def _transition(self, state: AppendState) -> None:
        logger.debug(f"{self._store.location}: {self.state.value if self.state else 'idle'} -> {state.value}")
        self.state = state

    def _load(self, suite: str, repo_url: str | None) -> tuple[Store, list[DecodeError]]:
        loaded = self._store.load()
        if loaded is None:
            logger.info(f"No store at {self._store.location}, starting a new one")
            return Store.empty(repo_url or self.settings.repo_url), []

        current = loaded.store
        if loaded.skipped:
            if self._strict:
                first = loaded.skipped[0]
                raise DecodeError(
                    f"{loaded.skipped_count} malformed runs in {self._store.location}, first: {first}",
                    first.kind,
                    tool=first.tool,
                    index=first.index,
                )
            logger.warning(
                f"{loaded.skipped_count} malformed runs in {self._store.location} were skipped "
                "and will not be written back"
            )
        if repo_url:
            if current.repo_url and current.repo_url != repo_url:
                raise ValidationError(
                    f"store at {self._store.location} belongs to {current.repo_url}, not {repo_url}",
                    suite=suite,
                )
            if not current.repo_url:
                current = current.model_copy(update={"repo_url": repo_url})
        return current, loaded.skipped

    def _merge(self, current: Store, suite: str, run: ToolRun, warnings: list[str]) -> Store:
        validated = validate_run(run, suite)
        previous = current.runs(suite)
        if previous and validated.date < previous[-1].date:
            message = (
                f"{suite}: run date {validated.date} is older than the last recorded run "
                f"({previous[-1].date}), appending out of order"
            )
            logger.warning(message)
            warnings.append(message)
        if any(existing.commit == validated.commit for existing in previous):
            message = f"{suite}: commit {validated.commit.id} is already recorded, appending a re-run"
            logger.warning(message)
            warnings.append(message)
        return current.with_run(suite, validated, last_update=self._clock())

    def append(
        self,
        suite: str,
        run: ToolRun | Mapping[str, Any],
        threshold_ratio: float | None = None,
        repo_url: str | None = None,
    ) -> AppendReport:
        """Append a run to a suite of the store.

        Args:
            suite: Suite name the run is grouped under.
            run: The new run, as a ToolRun or a mapping in the persisted shape.
            threshold_ratio: Override the engine's threshold for this append.
            repo_url: Expected project identifier; used for a new store.

        Returns:
            AppendReport with the regression signals of the run.

        Raises:
            ConfigurationError: If the threshold is invalid.
            ValidationError: If the run is invalid. Nothing is written.
            DecodeError: If the existing store is malformed as a whole.
            StoreIOError: If the store cannot be read or written. The file is left unchanged.
            LockTimeout: If the store lock is not acquired in time.
        """
        warnings: list[str] = []

        try:
            if not suite:
                raise ValidationError("suite name must not be empty")
            threshold = self._threshold_ratio if threshold_ratio is None else validate_threshold(threshold_ratio)
            new_run = coerce_run(run, suite)
            detector = RegressionDetector(threshold, self.settings.lower_is_better_units)

            with self._store.lock(self._lock_timeout):
                self._transition(AppendState.LOADING)
                current, skipped = self._load(suite, repo_url)

                self._transition(AppendState.DETECTING)
                result = detector.detect(HistoryIndex.build(current), suite, new_run)

                self._transition(AppendState.MERGING)
                merged = self._merge(current, suite, new_run, warnings)

                self._transition(AppendState.PERSISTING)
                self._store.save(merged)
        except Exception:
            self._transition(AppendState.FAILED)
            raise

        self._transition(AppendState.DONE)
        logger.info(
            f"Appended {len(new_run)} results for {new_run.commit.id[:12]} to {suite} "
            f"in {self._store.location} ({merged.size} runs)"
        )
        for signal in result.regressions:
            logger.info(f"Regression: {signal.message}")

        return AppendReport(
            suite=suite,
            result=result,
            new_store_size=merged.size,
            skipped_entries=list(skipped),
            warnings=warnings,
        )


def append(
    store: StorageProtocol | str | Path,
    suite: str,
    run: ToolRun | Mapping[str, Any],
    threshold_ratio: float | None = None,
    **kwargs: Any,
) -> AppendReport:
    """Append a run with a one-off engine.

    Shorthand for ``AppendEngine(store, **kwargs).append(suite, run, threshold_ratio)``.
    """
    return AppendEngine(store, **kwargs).append(suite, run, threshold_ratio=threshold_ratio)
