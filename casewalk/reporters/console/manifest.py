"""Console reporter manifest."""

from casewalk.reporters.console.reporter import ConsoleReporter
from casewalk.reporters.manifest import ReporterManifest

console_manifest = ReporterManifest(reporter_factory=ConsoleReporter.from_options)
