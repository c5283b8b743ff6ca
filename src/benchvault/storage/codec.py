"""Encoding and decoding of the persisted store document.

The document is JSON, optionally wrapped as ``window.BENCHMARK_DATA = {...}``
so the static chart page can load it with a script tag. Decoding tolerates
individually malformed runs; encoding is deterministic so repeated saves of
the same data are byte-identical.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from benchvault.core.exceptions import DecodeError, DecodeErrorKind
from benchvault.core.types import Store, ToolRun

logger = logging.getLogger(__name__)

_JS_ASSIGNMENT = re.compile(r"^\s*window\.(?P<variable>[A-Za-z_$][\w$]*)\s*=\s*")
_HEADER_KEYS = {"lastUpdate", "repoUrl", "entries"}
# Integers above this are not exactly representable as doubles.
_MAX_SAFE_INTEGER = 2**53 - 1


@dataclass
class LoadResult:
    """Outcome of decoding a store document.

    Attributes:
        store: The decoded store, without the skipped runs.
        skipped: One diagnostic per run that failed validation.
        js_variable: Global variable name if the document was JS-wrapped.
    """

    store: Store
    skipped: list[DecodeError] = field(default_factory=list)
    js_variable: str | None = None

    @property
    def skipped_count(self) -> int:
        """Number of runs dropped during decoding."""
        return len(self.skipped)


def describe_validation_error(error: PydanticValidationError) -> str:
    """Flatten a pydantic error into a single diagnostic line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def _malformed(message: str) -> DecodeError:
    return DecodeError(message, DecodeErrorKind.MALFORMED_DOCUMENT)


def loads(text: str) -> LoadResult:
    """Decode a store document.

    Args:
        text: Document text, plain JSON or ``window.<name> = {...}``.

    Returns:
        LoadResult with the valid runs and a diagnostic per skipped run.

    Raises:
        DecodeError: MALFORMED_DOCUMENT if the top-level shape is wrong.

    Example:
        >>> result = loads(Path("data.js").read_text())
        >>> result.skipped_count
        0
    """
    js_variable = None
    body = text
    match = _JS_ASSIGNMENT.match(text)
    if match:
        js_variable = match.group("variable")
        body = text[match.end() :].rstrip().rstrip(";")

    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise _malformed(f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e

    if not isinstance(document, dict):
        raise _malformed(f"document must be an object, got {type(document).__name__}")

    last_update = document.get("lastUpdate", 0)
    if isinstance(last_update, bool) or not isinstance(last_update, int):
        raise _malformed(f"lastUpdate must be an integer, got {last_update!r}")
    repo_url = document.get("repoUrl", "")
    if not isinstance(repo_url, str):
        raise _malformed(f"repoUrl must be a string, got {repo_url!r}")
    raw_entries = document.get("entries")
    if not isinstance(raw_entries, dict):
        raise _malformed("entries must be an object mapping suite names to runs")

    entries: dict[str, tuple[ToolRun, ...]] = {}
    skipped: list[DecodeError] = []
    for suite, raw_runs in raw_entries.items():
        if not isinstance(raw_runs, list):
            raise _malformed(f"entries.{suite} must be an array")
        runs: list[ToolRun] = []
        for index, raw_run in enumerate(raw_runs):
            try:
                runs.append(ToolRun.model_validate(raw_run))
            except PydanticValidationError as e:
                error = DecodeError(
                    describe_validation_error(e),
                    DecodeErrorKind.MALFORMED_ENTRY,
                    tool=suite,
                    index=index,
                )
                logger.warning(f"Skipping malformed run {error}")
                skipped.append(error)
        entries[suite] = tuple(runs)

    extras = {
        key: value
        for key, value in document.items()
        if key not in _HEADER_KEYS and key not in Store.model_fields
    }
    store = Store(last_update=last_update, repo_url=repo_url, entries=entries, **extras)
    return LoadResult(store=store, skipped=skipped, js_variable=js_variable)


def _js_number(value: float) -> float | int:
    # Integral doubles are written the way JavaScript prints them ("100", not "100.0").
    if value.is_integer() and abs(value) <= _MAX_SAFE_INTEGER:
        return int(value)
    return value


def to_document(store: Store) -> dict[str, Any]:
    """Convert a store to its persisted document with normalized numbers."""
    document = store.to_document()
    for runs in document["entries"].values():
        for run in runs:
            for bench in run.get("benches", ()):
                bench["value"] = _js_number(bench["value"])
    return document


def dumps(store: Store, js_variable: str | None = None) -> str:
    """Encode a store deterministically.

    Key order follows the record model, suites and runs keep their append
    order, floats use the shortest round-trip representation.

    Args:
        store: Store to encode.
        js_variable: Wrap the JSON as ``window.<js_variable> = ...`` when set.

    Returns:
        Encoded document ending with a newline.
    """
    body = json.dumps(to_document(store), indent=4, ensure_ascii=False, allow_nan=False)
    if js_variable:
        return f"window.{js_variable} = {body}\n"
    return f"{body}\n"
