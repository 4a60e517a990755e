"""Unit-test execution engine with nested subcases and pluggable reporters."""

from casewalk.approx import Approx
from casewalk.assertions import RequireFailure
from casewalk.context import TestContext
from casewalk.decomposition import expr, to_string
from casewalk.models.options import RunOptions
from casewalk.registry import (
    Registry,
    TestSuite,
    default_registry,
    exception_translator,
    test_case,
    test_suite,
)
from casewalk.runner import TestRunner
from casewalk.version import __version__

__all__ = [
    "Approx",
    "Registry",
    "RequireFailure",
    "RunOptions",
    "TestContext",
    "TestRunner",
    "TestSuite",
    "__version__",
    "default_registry",
    "exception_translator",
    "expr",
    "test_case",
    "test_suite",
    "to_string",
]
