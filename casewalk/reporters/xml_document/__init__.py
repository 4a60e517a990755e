"""XML reporter module."""

from casewalk.reporters.xml_document.manifest import xml_manifest
from casewalk.reporters.xml_document.reporter import XmlReporter

__all__ = ["XmlReporter", "xml_manifest"]
