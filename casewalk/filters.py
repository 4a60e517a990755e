"""Wildcard filters used to select test cases and subcases."""

import re
from collections.abc import Sequence
from functools import lru_cache

from casewalk.models.data import TestCaseData
from casewalk.models.options import RunOptions


@lru_cache(maxsize=512)
def _compile(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    regex = "".join(
        ".*" if char == "*" else "." if char == "?" else re.escape(char)
        for char in pattern
    )
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile(regex, flags)


def wildcard_match(candidate: str, pattern: str, case_sensitive: bool = False) -> bool:
    """Match the whole candidate against a pattern with ``*`` and ``?``."""
    return _compile(pattern, case_sensitive).fullmatch(candidate) is not None


def matches_any(
    candidate: str,
    patterns: Sequence[str],
    match_empty: bool,
    case_sensitive: bool = False,
) -> bool:
    """Check the candidate against a list of patterns.

    Args:
        candidate: String to test (file name, suite, test or subcase name)
        patterns: Wildcard patterns, any of which may match
        match_empty: Result when ``patterns`` is empty; ``True`` for
            inclusion filters, ``False`` for exclusion filters
        case_sensitive: Whether letter case must match

    """
    if not patterns:
        return match_empty
    return any(wildcard_match(candidate, pattern, case_sensitive) for pattern in patterns)


def passes_filters(test_case: TestCaseData, options: RunOptions) -> bool:
    """Apply the file, suite and name include/exclude filter pairs."""
    cs = options.case_sensitive
    checks = (
        (test_case.file, options.source_file, options.source_file_exclude),
        (test_case.test_suite, options.test_suite, options.test_suite_exclude),
        (test_case.name, options.test_case, options.test_case_exclude),
    )
    return all(
        matches_any(value, include, True, cs) and not matches_any(value, exclude, False, cs)
        for value, include, exclude in checks
    )


def subcase_passes_filters(name: str, options: RunOptions) -> bool:
    """Apply the subcase include/exclude filter pair."""
    cs = options.case_sensitive
    return matches_any(name, options.subcase, True, cs) and not matches_any(
        name, options.subcase_exclude, False, cs
    )


def in_execution_range(position: int, options: RunOptions) -> bool:
    """Check a 1-based position among filter-passing tests against first/last.

    An upper bound below ``first`` is ignored, so ``first`` alone still selects
    every later test.
    """
    last = options.last
    if last is not None and options.first <= last < position:
        return False
    return options.first <= position
