"""JSON summary reporter manifest."""

from casewalk.reporters.json_summary.reporter import JsonSummaryReporter
from casewalk.reporters.manifest import ReporterManifest

json_manifest = ReporterManifest(reporter_factory=JsonSummaryReporter.from_options)
