"""Unit tests for core types module (Commit, BenchResult, ToolRun, Store)."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from benchvault.core.types import (
    BenchResult,
    Commit,
    CommitUser,
    Direction,
    Store,
    ToolRun,
    parse_timestamp,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def commit() -> Commit:
    """A commit as written by the CI provider."""
    return Commit(
        author=CommitUser(email="adam@warski.org", name="adamw", username="adamw"),
        committer=CommitUser(email="adam@warski.org", name="adamw", username="adamw"),
        distinct=True,
        id="46f1a97238cea53733e55d665c97045b9806e49d",
        message="WIP",
        timestamp="2023-12-05T21:39:23+01:00",
        tree_id="cdb40ffd7f8c21f907ce2c6c17de95a92ee71dcb",
        url="https://github.com/softwaremill/jox/commit/46f1a97238cea53733e55d665c97045b9806e49d",
    )


@pytest.fixture
def run(commit: Commit) -> ToolRun:
    """A run with two results."""
    return ToolRun(
        commit=commit,
        date=1701809122137,
        tool="jmh",
        benches=[
            BenchResult(name="jox.RendezvousBenchmark.channel", value=171.05, unit="ns/op", extra="forks: 3"),
            BenchResult(name="jox.RendezvousBenchmark.exchanger", value=99.47, unit="ns/op"),
        ],
    )


# =============================================================================
# Timestamps
# =============================================================================


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_offset(self) -> None:
        """ISO strings with an offset are converted to epoch correctly."""
        assert parse_timestamp("2023-12-05T21:39:23+01:00").timestamp() == 1701808763

    def test_zulu_suffix(self) -> None:
        """A trailing Z means UTC."""
        assert parse_timestamp("2023-12-05T20:39:23Z").timestamp() == 1701808763

    def test_naive_is_utc(self) -> None:
        """Naive strings are taken as UTC."""
        assert parse_timestamp("2023-12-05T20:39:23").timestamp() == 1701808763

    def test_epoch_seconds(self) -> None:
        """Numbers are seconds since epoch."""
        assert parse_timestamp(1701808763).timestamp() == 1701808763

    def test_invalid(self) -> None:
        """Garbage raises ValueError."""
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


# =============================================================================
# Commit
# =============================================================================


class TestCommit:
    """Tests for Commit model."""

    def test_epoch_seconds_from_iso(self, commit: Commit) -> None:
        """epoch_seconds parses the ISO timestamp."""
        assert commit.epoch_seconds == 1701808763.0

    def test_epoch_seconds_from_number(self) -> None:
        """Numeric timestamps are used as-is and keep their type."""
        commit = Commit(id="abc", timestamp=1701808763)
        assert commit.epoch_seconds == 1701808763.0
        assert isinstance(commit.timestamp, int)

    def test_identity_is_hash(self, commit: Commit) -> None:
        """Commits with the same hash are equal regardless of other fields."""
        other = Commit(id=commit.id, message="amended", timestamp="2024-01-01T00:00:00Z")

        assert other == commit
        assert hash(other) == hash(commit)

    def test_different_hash_not_equal(self, commit: Commit) -> None:
        """Different hashes are different commits."""
        other = commit.model_copy(update={"id": "4d81568193658fe9e6825319cd8bc70a9c807e19"})
        assert other != commit

    def test_empty_id_rejected(self) -> None:
        """An empty hash is invalid."""
        with pytest.raises(ValidationError, match="commit id must not be empty"):
            Commit(id="", timestamp="2023-12-05T21:39:23+01:00")

    def test_bad_timestamp_rejected(self) -> None:
        """Non ISO-8601 strings are invalid."""
        with pytest.raises(ValidationError, match="ISO-8601"):
            Commit(id="abc", timestamp="last tuesday")

    def test_frozen(self, commit: Commit) -> None:
        """Commits are immutable."""
        with pytest.raises(ValidationError):
            commit.message = "changed"  # type: ignore[misc]

    def test_unknown_fields_preserved(self) -> None:
        """Fields written by newer producers survive a dump."""
        commit = Commit.model_validate({"id": "abc", "timestamp": 1, "signature": "gpg"})
        assert commit.model_dump()["signature"] == "gpg"


# =============================================================================
# BenchResult
# =============================================================================


class TestBenchResult:
    """Tests for BenchResult model."""

    def test_create(self) -> None:
        """BenchResult keeps name, value, unit and extra verbatim."""
        bench = BenchResult(name='suite.method ( {"capacity":"10"} )', value=141.6, unit="ns/op", extra="x")

        assert bench.name == 'suite.method ( {"capacity":"10"} )'
        assert bench.value == 141.6
        assert bench.unit == "ns/op"
        assert bench.extra == "x"
        assert bench.direction is None

    def test_series_key_includes_parameters(self) -> None:
        """Parameterizations of one method are distinct series."""
        a = BenchResult(name='m ( {"capacity":"1"} )', value=1.0, unit="ns/op")
        b = BenchResult(name='m ( {"capacity":"10"} )', value=1.0, unit="ns/op")

        assert a.series_key("Benchmark") != b.series_key("Benchmark")
        assert a.series_key("Benchmark") == ("Benchmark", 'm ( {"capacity":"1"} )')

    def test_empty_name_rejected(self) -> None:
        """An empty name is invalid."""
        with pytest.raises(ValidationError, match="bench name must not be empty"):
            BenchResult(name="", value=1.0, unit="ns/op")

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value: float) -> None:
        """NaN and infinities are invalid."""
        with pytest.raises(ValidationError, match="must be finite"):
            BenchResult(name="a", value=value, unit="ns/op")

    def test_negative_allowed(self) -> None:
        """The model does not enforce sign."""
        assert BenchResult(name="a", value=-1.0, unit="ns/op").value == -1.0

    def test_explicit_direction(self) -> None:
        """Direction is parsed from its string value."""
        bench = BenchResult.model_validate({"name": "a", "value": 1, "unit": "ms", "direction": "lower_is_better"})
        assert bench.direction is Direction.LOWER_IS_BETTER


# =============================================================================
# ToolRun / Store
# =============================================================================


class TestToolRun:
    """Tests for ToolRun model."""

    def test_len(self, run: ToolRun) -> None:
        """len() counts bench results."""
        assert len(run) == 2

    def test_benches_immutable(self, run: ToolRun) -> None:
        """Benches are stored as a tuple."""
        assert isinstance(run.benches, tuple)

    def test_invalid_bench_fails_run(self, commit: Commit) -> None:
        """One invalid result invalidates the run."""
        with pytest.raises(ValidationError):
            ToolRun(
                commit=commit,
                date=1,
                tool="jmh",
                benches=[{"name": "a", "value": float("nan"), "unit": "ns/op"}],  # type: ignore[list-item]
            )


class TestStore:
    """Tests for Store model."""

    def test_empty(self) -> None:
        """empty() creates a store without entries."""
        store = Store.empty("https://github.com/softwaremill/jox")

        assert store.repo_url == "https://github.com/softwaremill/jox"
        assert store.entries == {}
        assert store.size == 0

    def test_with_run_returns_new_store(self, run: ToolRun) -> None:
        """with_run() leaves the original store untouched."""
        store = Store.empty()
        updated = store.with_run("Benchmark", run, last_update=42)

        assert store.size == 0
        assert store.last_update == 0
        assert updated.size == 1
        assert updated.last_update == 42
        assert updated.runs("Benchmark") == (run,)

    def test_with_run_appends_in_order(self, run: ToolRun) -> None:
        """Runs are appended after existing ones of the same suite."""
        second = run.model_copy(update={"date": run.date + 1})
        store = Store.empty().with_run("Benchmark", run, 1).with_run("Benchmark", second, 2)

        assert [r.date for r in store.runs("Benchmark")] == [run.date, run.date + 1]

    def test_runs_unknown_suite(self) -> None:
        """runs() of an unknown suite is empty."""
        assert Store.empty().runs("nope") == ()

    def test_to_document_uses_persisted_names(self, run: ToolRun) -> None:
        """to_document() uses camelCase header keys and drops unset optionals."""
        document = Store.empty("repo").with_run("Benchmark", run, 7).to_document()

        assert list(document) == ["lastUpdate", "repoUrl", "entries"]
        bench = document["entries"]["Benchmark"][0]["benches"][1]
        assert list(bench) == ["name", "value", "unit"]
