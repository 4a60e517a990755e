"""Loading of reporters and listeners from entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points

from casewalk.filters import matches_any
from casewalk.models.data import ReporterInfo
from casewalk.reporters.manifest import ReporterManifest

REPORTERS_GROUP = "casewalk.reporters"
LISTENERS_GROUP = "casewalk.listeners"

log = logging.getLogger(__name__)


class ReporterNotFoundError(Exception):
    """Raised when a reporter is not found."""


def _ordered(group: str) -> list[tuple[str, ReporterManifest]]:
    loaded = [(entry.name, entry.load()) for entry in entry_points(group=group)]
    return sorted(loaded, key=lambda item: (item[1].priority, item[0]))


def select_reporters(
    patterns: Sequence[str], case_sensitive: bool = False
) -> Sequence[tuple[str, ReporterManifest]]:
    """Return every installed reporter whose name matches one of the patterns.

    Raises:
        ReporterNotFoundError: If a pattern without wildcards names no
            installed reporter

    """
    available = _ordered(REPORTERS_GROUP)
    names = [name for name, _ in available]
    for pattern in patterns:
        if "*" not in pattern and "?" not in pattern:
            if not matches_any(pattern, names, False, case_sensitive):
                raise ReporterNotFoundError(
                    f"Reporter '{pattern}' not found. Available reporters: {names}"
                )

    selected = [
        (name, manifest)
        for name, manifest in available
        if matches_any(name, patterns, False, case_sensitive)
    ]
    log.debug("Selected reporters: %s", ", ".join(name for name, _ in selected))
    return selected


def load_listeners() -> Sequence[tuple[str, ReporterManifest]]:
    """Return every installed listener, ordered by priority."""
    return _ordered(LISTENERS_GROUP)


def describe_installed() -> Sequence[ReporterInfo]:
    """Describe installed listeners and reporters for ``--list-reporters``."""
    return [
        *(
            ReporterInfo(name=name, priority=manifest.priority, is_listener=True)
            for name, manifest in load_listeners()
        ),
        *(
            ReporterInfo(name=name, priority=manifest.priority, is_listener=False)
            for name, manifest in _ordered(REPORTERS_GROUP)
        ),
    ]
