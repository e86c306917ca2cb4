"""Merge per-repository outcomes into one ordered, renderable report.

The report is a pure function of the outcome set: entries are sorted by
canonical path, so the order in which the executor finished is invisible.
Repositories with nothing to say (e.g. a clean repo for ``status``) are
left out of both renderings; failures are always shown.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from gg.core.repo import RepoIdentity
from gg.core.result import Err, Ok
from gg.git.inspector import FailureReason, QueryFailure, QueryKind
from gg.query.executor import QueryOutcome

__all__ = [
    "Report",
    "ReportEntry",
    "aggregate",
    "message_report",
    "render_json",
    "render_text",
]

COLUMN_GAP = 2


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """One repository and what its query produced."""

    repo: RepoIdentity
    outcome: QueryOutcome

    @property
    def failure(self) -> QueryFailure | None:
        if isinstance(self.outcome, Err):
            return self.outcome.error
        return None

    def is_finding(self, kind: QueryKind) -> bool:
        """True if this entry belongs in the output for kind."""
        if kind.lists_everything or isinstance(self.outcome, Err):
            return True
        return len(self.outcome.value) > 0

    def detail_lines(self) -> list[str]:
        """Lines printed under the repository path."""
        match self.outcome:
            case Err(failure):
                return [f"error ({failure.reason}): {failure.message}"]
            case Ok(value):
                return [str(item) for item in value]


@dataclass(frozen=True, slots=True)
class Report:
    """The merged result of one command.

    Attributes:
        kind: Query that produced the entries, None for message-only reports
        entries: Exactly one entry per targeted repository, sorted by path
        messages: Lines about the operation as a whole
    """

    kind: QueryKind | None
    entries: tuple[ReportEntry, ...] = ()
    messages: tuple[str, ...] = ()

    def findings(self) -> tuple[ReportEntry, ...]:
        kind = self.kind
        if kind is None:
            return ()
        return tuple(e for e in self.entries if e.is_finding(kind))

    def failures(self) -> tuple[ReportEntry, ...]:
        return tuple(e for e in self.entries if e.failure is not None)

    def missing(self) -> tuple[RepoIdentity, ...]:
        """Repositories whose query failed because the directory is gone."""
        return tuple(
            e.repo
            for e in self.entries
            if e.failure is not None and e.failure.reason is FailureReason.MISSING
        )


def aggregate(
    kind: QueryKind,
    outcomes: Mapping[RepoIdentity, QueryOutcome],
    messages: Iterable[str] = (),
) -> Report:
    """Build a Report sorted by canonical path."""
    entries = tuple(ReportEntry(repo, outcomes[repo]) for repo in sorted(outcomes))
    return Report(kind=kind, entries=entries, messages=tuple(messages))


def message_report(*messages: str) -> Report:
    """A report that only carries overall messages (scan, info, ignore...)."""
    return Report(kind=None, messages=messages)


def render_text(report: Report, *, width: int | None = None) -> list[str]:
    """Render the report as output lines.

    Args:
        report: Report to render
        width: Terminal width for the ``list`` column layout; None prints one
            path per line

    Returns:
        Lines without trailing newlines.
    """
    lines = list(report.messages)
    findings = report.findings()
    if report.kind is QueryKind.LIST:
        lines.extend(_columns([str(e.repo) for e in findings], width))
        return lines

    pad = report.kind is not None and report.kind.pads_output
    for entry in findings:
        lines.append(str(entry.repo))
        lines.extend(line for line in entry.detail_lines() if line)
        if pad:
            lines.append("")
    return lines


def render_json(report: Report) -> dict[str, object]:
    """Render the report as a JSON-serializable dict.

    Only findings appear; failed repositories are listed both in
    ``repo_messages`` and, with their reason, in ``failures``.
    """
    repo_messages: dict[str, list[str]] = {}
    failures: dict[str, dict[str, str]] = {}
    for entry in report.findings():
        key = str(entry.repo)
        repo_messages[key] = [line for line in entry.detail_lines() if line]
        if entry.failure is not None:
            failures[key] = {
                "reason": entry.failure.reason.value,
                "message": entry.failure.message,
            }
    if report.kind is QueryKind.LIST:
        repo_messages = {key: [] for key in repo_messages}
    return {
        "error": False,
        "kind": str(report.kind) if report.kind is not None else None,
        "messages": list(report.messages),
        "repo_messages": repo_messages,
        "failures": failures,
    }


def _columns(items: list[str], width: int | None) -> list[str]:
    """Lay items out column-major, like ``ls``, within width characters."""
    if not items:
        return []
    cell = max(len(item) for item in items) + COLUMN_GAP
    if width is None or width < cell * 2 - COLUMN_GAP:
        return list(items)

    ncols = max(1, (width + COLUMN_GAP) // cell)
    nrows = math.ceil(len(items) / ncols)
    rows: list[str] = []
    for row in range(nrows):
        cells = [items[i] for i in range(row, len(items), nrows)]
        rows.append("".join(c.ljust(cell) for c in cells).rstrip())
    return rows
