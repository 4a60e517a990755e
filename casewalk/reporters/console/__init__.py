"""Console reporter module."""

from casewalk.reporters.console.manifest import console_manifest
from casewalk.reporters.console.reporter import ConsoleReporter, describe_assert

__all__ = ["ConsoleReporter", "console_manifest", "describe_assert"]
