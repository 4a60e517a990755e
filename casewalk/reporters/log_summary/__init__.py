"""Logging summary listener module."""

from casewalk.reporters.log_summary.manifest import log_manifest
from casewalk.reporters.log_summary.reporter import (
    STATUS_SYMBOLS,
    LogSummaryListener,
    log_results_summary,
)

__all__ = ["STATUS_SYMBOLS", "LogSummaryListener", "log_manifest", "log_results_summary"]
