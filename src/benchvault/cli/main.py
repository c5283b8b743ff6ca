"""Main CLI entry point for benchvault.

This module defines the Typer application and all CLI commands.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from benchvault import __version__
from benchvault.core.config import load_settings
from benchvault.core.exceptions import BenchvaultError, ConfigurationError

# Create the main Typer app
app = typer.Typer(
    name="benchvault",
    help="benchvault: Append-only benchmark history with regression detection.",
    add_completion=False,
    no_args_is_help=True,
)

# Global state for options
state: dict[str, bool] = {
    "json": False,
    "no_color": False,
}

EXIT_FLAGGED = 1
EXIT_ERROR = 2


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"benchvault v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    no_color: Annotated[
        bool,
        typer.Option(
            "--no-color",
            help="Disable colored output.",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to BENCHVAULT_LOG_LEVEL.",
        ),
    ] = None,
) -> None:
    """benchvault: Append-only benchmark history with regression detection.

    Record CI benchmark runs per commit and flag regressions against history.
    """
    state["json"] = json_output
    state["no_color"] = no_color
    try:
        level = log_level or load_settings().log_level
    except ConfigurationError as e:
        raise _fail(e) from e
    configure_logging(level)


def _fail(error: BenchvaultError | str, exit_code: int = EXIT_ERROR) -> typer.Exit:
    """Report an error and build the matching Exit."""
    if state["json"]:
        payload: dict[str, Any] = {"status": "error", "error": str(error)}
        if isinstance(error, BenchvaultError):
            payload["type"] = type(error).__name__
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(f"Error: {error}", err=True)
    return typer.Exit(exit_code)


def _read_run(run_file: str) -> Any:
    """Read a run payload from a file or stdin."""
    if run_file == "-":
        text = sys.stdin.read()
    else:
        path = Path(run_file)
        if not path.exists():
            raise _fail(f"Run file not found: {run_file}")
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise _fail(f"Run file is not valid UTF-8 at byte {e.start}: {run_file}") from e
        except OSError as e:
            raise _fail(f"Cannot read run file {run_file}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise _fail(f"Run file is not valid JSON: {e}") from e


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"benchvault v{__version__}")


@app.command("append")
def append_command(
    run_file: Annotated[
        str,
        typer.Argument(help="Path to the run JSON produced by a benchmark adapter ('-' for stdin)."),
    ],
    store: Annotated[
        str | None,
        typer.Option(
            "--store",
            "-s",
            help="Path to the store file. Defaults to BENCHVAULT_STORE_PATH.",
        ),
    ] = None,
    suite: Annotated[
        str,
        typer.Option(
            "--suite",
            "-n",
            help="Suite name the run is grouped under.",
        ),
    ] = "Benchmark",
    threshold: Annotated[
        float | None,
        typer.Option(
            "--threshold",
            "-t",
            help="Relative deviation tolerated before flagging (0.5 = 50%).",
        ),
    ] = None,
    repo_url: Annotated[
        str | None,
        typer.Option(
            "--repo-url",
            help="Project identifier; must match an existing store.",
        ),
    ] = None,
    lock_timeout: Annotated[
        float | None,
        typer.Option(
            "--lock-timeout",
            help="Seconds to wait for the store lock.",
        ),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Refuse to append when the store contains malformed runs.",
        ),
    ] = False,
    fail_on_regression: Annotated[
        bool,
        typer.Option(
            "--fail-on-regression",
            help="Exit with status 1 when a regression is detected.",
        ),
    ] = False,
    output: Annotated[
        str | None,
        typer.Option(
            "--output",
            "-o",
            help="Also write the JSON report to this file.",
        ),
    ] = None,
) -> None:
    """Append a benchmark run to the store and report regressions.

    Examples:
        benchvault append run.json --store benchmark-data/data.js
        benchvault append run.json --suite Benchmark --threshold 0.25 --fail-on-regression
        cat run.json | benchvault --json append - --store data.json
    """
    from benchvault.engine import AppendEngine
    from benchvault.reporters import ConsoleReporter, JSONReporter

    payload = _read_run(run_file)
    try:
        engine = AppendEngine(store, lock_timeout=lock_timeout, strict=strict)
        report = engine.append(suite, payload, threshold_ratio=threshold, repo_url=repo_url)
    except BenchvaultError as e:
        raise _fail(e) from e

    json_reporter = JSONReporter()
    if state["json"]:
        typer.echo(json_reporter.report(report))
    else:
        ConsoleReporter(use_colors=not state["no_color"]).report(report)
    if output:
        json_reporter.report_to_file(report, output)

    if fail_on_regression and report.has_regressions:
        raise typer.Exit(EXIT_FLAGGED)


@app.command()
def check(
    store: Annotated[
        str | None,
        typer.Option(
            "--store",
            "-s",
            help="Path to the store file. Defaults to BENCHVAULT_STORE_PATH.",
        ),
    ] = None,
) -> None:
    """Validate a store and report malformed runs.

    Exits with status 1 when runs had to be skipped.

    Example:
        benchvault check --store benchmark-data/data.js
    """
    from benchvault.history import HistoryIndex
    from benchvault.storage import JSONFileStore

    try:
        location = store or load_settings().store_path
        loaded = JSONFileStore(location).load()
    except BenchvaultError as e:
        raise _fail(e) from e
    if loaded is None:
        raise _fail(f"No store found at {location}")

    index = HistoryIndex.build(loaded.store)
    suites = {
        suite: {"runs": len(runs), "series": len(index.series_names(suite))}
        for suite, runs in loaded.store.entries.items()
    }
    skipped = [{"tool": e.tool, "index": e.index, "error": str(e)} for e in loaded.skipped]

    if state["json"]:
        typer.echo(
            json.dumps(
                {
                    "status": "ok" if not skipped else "skipped_entries",
                    "store": location,
                    "repo_url": loaded.store.repo_url,
                    "last_update": loaded.store.last_update,
                    "suites": suites,
                    "skipped_entries": skipped,
                },
                indent=2,
            )
        )
    else:
        typer.echo(f"  Store: {location}")
        typer.echo(f"  Project: {loaded.store.repo_url or '-'}")
        for suite, counts in suites.items():
            typer.echo(f"    {suite}: {counts['runs']} runs, {counts['series']} series")
        for entry in skipped:
            typer.echo(f"  Skipped: {entry['error']}")
        typer.echo(f"  {len(skipped)} malformed run(s)")

    if skipped:
        raise typer.Exit(EXIT_FLAGGED)


@app.command()
def history(
    suite: Annotated[
        str,
        typer.Option(
            "--suite",
            "-n",
            help="Suite name.",
        ),
    ],
    bench: Annotated[
        str,
        typer.Option(
            "--bench",
            "-b",
            help="Bench name, parameter suffix included.",
        ),
    ],
    store: Annotated[
        str | None,
        typer.Option(
            "--store",
            "-s",
            help="Path to the store file. Defaults to BENCHVAULT_STORE_PATH.",
        ),
    ] = None,
) -> None:
    """Show the recorded values of one series, oldest first.

    Example:
        benchvault history --suite Benchmark --bench jox.RendezvousBenchmark.channel
    """
    from benchvault.history import HistoryIndex
    from benchvault.storage import JSONFileStore

    try:
        location = store or load_settings().store_path
        loaded = JSONFileStore(location).load()
    except BenchvaultError as e:
        raise _fail(e) from e
    if loaded is None:
        raise _fail(f"No store found at {location}")

    points = HistoryIndex.build(loaded.store).lookup(suite, bench)
    if state["json"]:
        typer.echo(
            json.dumps(
                [
                    {
                        "commit": p.commit.id,
                        "timestamp": p.commit.timestamp,
                        "date": p.date,
                        "value": p.value,
                        "unit": p.unit,
                    }
                    for p in points
                ],
                indent=2,
            )
        )
        return

    if not points:
        typer.echo(f"  No history for {suite} / {bench}")
        return
    for p in points:
        typer.echo(f"  {p.commit.id[:12]}  {p.commit.timestamp}  {p.value:g} {p.unit}")


if __name__ == "__main__":
    app()
