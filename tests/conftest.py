"""Shared fixtures: a private registry and a run helper recording events."""

from typing import Any

import pytest

from casewalk.models.options import RunOptions
from casewalk.registry import Registry
from casewalk.runner import TestRunner
from casewalk.testing.recording import RecordingReporter, RunFn


@pytest.fixture
def registry() -> Registry:
    """Create an empty registry."""
    return Registry()


@pytest.fixture
def recorder() -> RecordingReporter:
    """Create a reporter recording every event."""
    return RecordingReporter()


@pytest.fixture
def run(registry: Registry, recorder: RecordingReporter) -> RunFn:
    """Run the registry with the recorder attached as the only reporter."""

    def _run(**options: Any) -> int:
        run_options = RunOptions(**{"fatal_guard": False, **options})
        runner = TestRunner(registry=registry, options=run_options, reporters=[recorder])
        return runner.run()

    return _run
