"""XML reporter manifest."""

from casewalk.reporters.manifest import ReporterManifest
from casewalk.reporters.xml_document.reporter import XmlReporter

xml_manifest = ReporterManifest(reporter_factory=XmlReporter.from_options)
