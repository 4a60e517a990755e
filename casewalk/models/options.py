"""Configuration of a test run."""

from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator

from casewalk.models.base import Model


class RunOptions(Model):
    """All options that influence filtering, ordering, execution and output."""

    source_file: Sequence[str] = Field(
        default=(), description="Only run tests declared in matching files"
    )
    source_file_exclude: Sequence[str] = Field(
        default=(), description="Skip tests declared in matching files"
    )
    test_suite: Sequence[str] = Field(
        default=(), description="Only run tests in matching suites"
    )
    test_suite_exclude: Sequence[str] = Field(
        default=(), description="Skip tests in matching suites"
    )
    test_case: Sequence[str] = Field(
        default=(), description="Only run matching test cases"
    )
    test_case_exclude: Sequence[str] = Field(
        default=(), description="Skip matching test cases"
    )
    subcase: Sequence[str] = Field(default=(), description="Only enter matching subcases")
    subcase_exclude: Sequence[str] = Field(
        default=(), description="Never enter matching subcases"
    )
    reporters: Sequence[str] = Field(
        default=("console",), description="Reporters to attach (wildcards allowed)"
    )

    order_by: Literal["file", "suite", "name", "rand"] = Field(
        default="file", description="How test cases are ordered"
    )
    rand_seed: int = Field(default=0, description="Seed for random ordering")
    first: int = Field(
        default=0, ge=0, description="First test (1-based) among those passing filters"
    )
    last: int | None = Field(
        default=None, ge=0, description="Last test among those passing filters"
    )
    abort_after: int = Field(
        default=0, ge=0, description="Stop after this many failed assertions (0 = never)"
    )
    subcase_filter_levels: int = Field(
        default=2_000_000_000,
        ge=0,
        description="Apply subcase filters only to the first N nesting levels",
    )

    success: bool = Field(default=False, description="Report passing assertions too")
    case_sensitive: bool = Field(default=False, description="Case sensitive filters")
    no_exitcode: bool = Field(default=False, description="Always exit with 0")
    no_run: bool = Field(default=False, description="Do not run any test")
    no_skip: bool = Field(default=False, description="Ignore the skip decorator")
    no_throw: bool = Field(
        default=False, description="Do not execute exception-related assertions"
    )
    fatal_guard: bool = Field(
        default=True, description="Report crashes caused by fatal signals"
    )

    count: bool = Field(default=False, description="Only count matching tests")
    list_test_cases: bool = Field(default=False, description="Only list test cases")
    list_test_suites: bool = Field(default=False, description="Only list test suites")
    list_reporters: bool = Field(default=False, description="Only list reporters")
    version: bool = Field(default=False, description="Only print the version")

    duration: bool = Field(default=False, description="Print test case durations")
    no_path_in_filenames: bool = Field(
        default=False, description="Strip directories from reported file names"
    )
    gnu_file_line: bool = Field(
        default=True, description="Report locations as file:line: instead of file(line):"
    )
    no_line_numbers: bool = Field(
        default=False, description="Report 0 instead of real line numbers"
    )
    no_version: bool = Field(default=False, description="Omit the version banner")
    no_intro: bool = Field(default=False, description="Omit the intro banner")
    out: Path | None = Field(
        default=None, description="Write reporter output to this file instead of stdout"
    )

    @model_validator(mode="after")
    def _reporters_not_empty(self) -> "RunOptions":
        if not self.reporters:
            raise ValueError("at least one reporter pattern is required")
        return self
