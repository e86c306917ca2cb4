"""Concurrent multi-repository queries and report aggregation."""

from gg.query.executor import QueryExecutor, QueryOutcome, default_parallelism
from gg.query.report import (
    Report,
    ReportEntry,
    aggregate,
    message_report,
    render_json,
    render_text,
)

__all__ = [
    # executor
    "QueryExecutor",
    "QueryOutcome",
    "default_parallelism",
    # report
    "Report",
    "ReportEntry",
    "aggregate",
    "message_report",
    "render_json",
    "render_text",
]
