"""JSON summary reporter module."""

from casewalk.reporters.json_summary.manifest import json_manifest
from casewalk.reporters.json_summary.reporter import (
    CaseResult,
    JsonSummaryReporter,
    case_status,
    format_output,
)

__all__ = [
    "CaseResult",
    "JsonSummaryReporter",
    "case_status",
    "format_output",
    "json_manifest",
]
