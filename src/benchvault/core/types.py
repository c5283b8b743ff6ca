"""Core type definitions for benchvault.

This module defines the record model persisted in a benchmark store:
commits, benchmark results, tool runs and the store document itself.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


def parse_timestamp(value: str | float) -> datetime:
    """Parse a commit timestamp into an aware datetime.

    Args:
        value: ISO-8601 string (a trailing ``Z`` is accepted) or seconds since epoch.

    Returns:
        Timezone-aware datetime. Naive strings are taken as UTC.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Direction(str, Enum):
    """Which way a metric improves."""

    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"


class CommitUser(BaseModel):
    """Author or committer display information.

    All fields are opaque strings used for display only.
    """

    model_config = {"frozen": True, "extra": "allow"}

    email: str | None = Field(default=None, description="E-mail address")
    name: str | None = Field(default=None, description="Display name")
    username: str | None = Field(default=None, description="Account name on the hosting service")


class Commit(BaseModel):
    """Immutable identity of a code revision.

    Two commits are the same commit iff their hashes are byte-equal;
    message, timestamp and people are not part of the identity.

    Attributes:
        id: The commit hash.
        author: Author display information.
        committer: Committer display information.
        distinct: Whether the commit is distinct within its push.
        message: Commit message.
        timestamp: ISO-8601 string or seconds since epoch, stored as given.
        tree_id: Hash of the commit's tree.
        url: Link to the commit, for display only.

    Example:
        >>> commit = Commit(
        ...     id="46f1a97238cea53733e55d665c97045b9806e49d",
        ...     message="WIP",
        ...     timestamp="2023-12-05T21:39:23+01:00",
        ...     url="https://github.com/softwaremill/jox/commit/46f1a97",
        ... )
        >>> commit.epoch_seconds
        1701808763.0
    """

    model_config = {"frozen": True, "extra": "allow"}

    author: CommitUser | None = Field(default=None, description="Author display information")
    committer: CommitUser | None = Field(default=None, description="Committer display information")
    distinct: bool | None = Field(default=None, description="Whether the commit is distinct in its push")
    id: str = Field(..., description="Commit hash")
    message: str = Field(default="", description="Commit message")
    timestamp: str | int | float = Field(..., description="Commit time (ISO-8601 or epoch seconds)")
    tree_id: str | None = Field(default=None, description="Tree hash")
    url: str = Field(default="", description="Commit URL, display only")

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        if not value:
            raise ValueError("commit id must not be empty")
        return value

    @field_validator("timestamp")
    @classmethod
    def _validate_timestamp(cls, value: str | int | float) -> str | int | float:
        if isinstance(value, str):
            try:
                parse_timestamp(value)
            except ValueError as e:
                raise ValueError(f"timestamp is not ISO-8601: {value!r}") from e
        elif not math.isfinite(value):
            raise ValueError("timestamp must be finite")
        return value

    @property
    def epoch_seconds(self) -> float:
        """Commit time as seconds since epoch, used for chronological ordering."""
        if isinstance(self.timestamp, (int, float)):
            return float(self.timestamp)
        return parse_timestamp(self.timestamp).timestamp()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class BenchResult(BaseModel):
    """One measured metric of a benchmark run.

    The name includes any parameterization suffix verbatim, e.g.
    ``suite.method ( {"capacity":"10"} )``; two parameterizations are
    distinct series.

    Attributes:
        name: Benchmark name, parameter suffix included.
        value: Measured value. Must be finite.
        unit: Unit label, never converted (e.g. ``ns/op``).
        extra: Opaque free-text metadata from the adapter.
        range: Opaque spread of the measurement (e.g. ``± 1.2``).
        direction: Explicit improvement direction; inferred from the unit when unset.

    Example:
        >>> bench = BenchResult(name="jox.RendezvousBenchmark.channel", value=171.05, unit="ns/op")
        >>> bench.series_key("Benchmark")
        ('Benchmark', 'jox.RendezvousBenchmark.channel')
    """

    model_config = {"frozen": True, "extra": "allow"}

    name: str = Field(..., description="Benchmark name including parameters")
    value: float = Field(..., description="Measured value")
    unit: str = Field(..., description="Unit label")
    extra: str | None = Field(default=None, description="Opaque adapter metadata")
    range: str | None = Field(default=None, description="Opaque measurement spread")
    direction: Direction | None = Field(default=None, description="Explicit improvement direction")

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("bench name must not be empty")
        return value

    @field_validator("value")
    @classmethod
    def _validate_value(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"bench value must be finite, got {value}")
        return value

    def series_key(self, suite: str) -> tuple[str, str]:
        """Key identifying the series this result belongs to."""
        return (suite, self.name)


class ToolRun(BaseModel):
    """All results one benchmarking tool produced for one commit.

    Attributes:
        commit: The measured commit.
        date: Epoch millis when the run was recorded.
        tool: Adapter identifier (e.g. ``jmh``).
        benches: Measured results.
    """

    model_config = {"frozen": True, "extra": "allow"}

    commit: Commit = Field(..., description="The measured commit")
    date: int = Field(..., description="Epoch millis when the run was recorded")
    tool: str = Field(..., description="Benchmarking tool identifier")
    benches: tuple[BenchResult, ...] = Field(default=(), description="Measured results")

    def __len__(self) -> int:
        """Return the number of results in the run."""
        return len(self.benches)


class Store(BaseModel):
    """The persisted benchmark history of one project.

    Runs are grouped by suite name and kept in append order. A Store value
    is never modified in place; appending produces a new Store.

    Attributes:
        last_update: Epoch millis of the last successful append.
        repo_url: Stable project identifier.
        entries: Suite name to runs, in append order.

    Example:
        >>> store = Store.empty("https://github.com/softwaremill/jox")
        >>> store = store.with_run("Benchmark", run, last_update=1702396226860)
        >>> store.size
        1
    """

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    last_update: int = Field(default=0, alias="lastUpdate", description="Epoch millis of last append")
    repo_url: str = Field(default="", alias="repoUrl", description="Project identifier")
    entries: dict[str, tuple[ToolRun, ...]] = Field(
        default_factory=dict,
        description="Runs grouped by suite name, in append order",
    )

    @classmethod
    def empty(cls, repo_url: str = "") -> Store:
        """Create a store with no entries."""
        return cls(last_update=0, repo_url=repo_url, entries={})

    @property
    def size(self) -> int:
        """Total number of runs across all suites."""
        return sum(len(runs) for runs in self.entries.values())

    def runs(self, suite: str) -> tuple[ToolRun, ...]:
        """Runs of a suite in append order (empty for an unknown suite)."""
        return self.entries.get(suite, ())

    def with_run(self, suite: str, run: ToolRun, last_update: int) -> Store:
        """Return a new store with ``run`` appended to ``suite``.

        Args:
            suite: Suite name to append to.
            run: The run to append.
            last_update: New ``lastUpdate`` value in epoch millis.

        Returns:
            A new Store; this one is left untouched.
        """
        entries: dict[str, tuple[ToolRun, ...]] = dict(self.entries)
        entries[suite] = (*entries.get(suite, ()), run)
        return self.model_copy(update={"entries": entries, "last_update": last_update})

    def to_document(self) -> dict[str, Any]:
        """Convert to the persisted document shape.

        Only fields that were given are written, so explicit nulls and
        unknown keys of loaded runs come back out unchanged.
        """
        document = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return {
            "lastUpdate": self.last_update,
            "repoUrl": self.repo_url,
            "entries": document.pop("entries", {}),
            **document,
        }
