"""JSON reporter for benchvault.

Machine-readable append reports for CI steps that post comments or
notifications after a run has been recorded.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from benchvault.engine import AppendReport


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JSONReporter:
    """Serialize append reports as JSON documents.

    The document is the report's ``to_dict()`` with a ``status`` of
    ``"regressed"`` or ``"ok"``, the generation time and caller metadata.

    Attributes:
        indent: JSON indentation level (None for a single line).

    Example:
        >>> reporter = JSONReporter()
        >>> print(reporter.report(append_report, metadata={"workflow": "bench"}))
        {
          "status": "ok",
          "generated_at": "2024-01-15T10:30:00+00:00",
          "suite": "Benchmark",
          ...
        }
    """

    def __init__(self, indent: int | None = 2, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize JSONReporter.

        Args:
            indent: Indentation level, None for a single line.
            clock: Returns the generation time (default: now, UTC).
        """
        self.indent = indent
        self._clock = clock or _utc_now

    def to_dict(self, report: AppendReport, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the JSON document for ``report``."""
        return {
            "status": "regressed" if report.has_regressions else "ok",
            "generated_at": self._clock().isoformat(timespec="seconds"),
            **report.to_dict(),
            "metadata": dict(metadata or {}),
        }

    def report(self, report: AppendReport, metadata: dict[str, Any] | None = None) -> str:
        """Render ``report`` as a JSON string."""
        return json.dumps(self.to_dict(report, metadata), indent=self.indent)

    def report_to_file(
        self,
        report: AppendReport,
        path: Path | str,
        metadata: dict[str, Any] | None = None,
    ) -> Path:
        """Write the JSON document to ``path``, creating parent directories.

        Returns:
            The written path.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.report(report, metadata) + "\n", encoding="utf-8")
        return target
