"""Logging summary listener manifest."""

from casewalk.reporters.log_summary.reporter import LogSummaryListener
from casewalk.reporters.manifest import ReporterManifest

log_manifest = ReporterManifest(reporter_factory=LogSummaryListener.from_options)
