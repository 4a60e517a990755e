"""Reporter manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from casewalk.models.options import RunOptions
from casewalk.reporters.base import Reporter


@dataclass(frozen=True, kw_only=True)
class ReporterManifest:
    """Manifest describing a reporter or listener plugin.

    Reporters are published under the ``casewalk.reporters`` entry point
    group and selected by name; listeners are published under
    ``casewalk.listeners`` and always attached. Within a group, sinks with a
    lower priority are notified first.
    """

    reporter_factory: Callable[[RunOptions, TextIO], Reporter]
    priority: int = 0
