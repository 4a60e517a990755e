"""CLI entry point for the casewalk test runner."""

import argparse
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from casewalk.discovery import DiscoveryError, load_test_modules
from casewalk.models.options import RunOptions
from casewalk.registry import Registry, default_registry
from casewalk.reporters.loading import ReporterNotFoundError
from casewalk.runner import TestRunner

FILTER_OPTIONS = (
    ("--test-case", "-tc", "test_case", "Only run test cases with matching names"),
    ("--test-case-exclude", "-tce", "test_case_exclude", "Skip matching test cases"),
    ("--source-file", "-sf", "source_file", "Only run test cases declared in matching files"),
    (
        "--source-file-exclude",
        "-sfe",
        "source_file_exclude",
        "Skip test cases declared in matching files",
    ),
    ("--test-suite", "-ts", "test_suite", "Only run test cases of matching suites"),
    ("--test-suite-exclude", "-tse", "test_suite_exclude", "Skip matching test suites"),
    ("--subcase", "-sc", "subcase", "Only enter subcases with matching names"),
    ("--subcase-exclude", "-sce", "subcase_exclude", "Never enter matching subcases"),
    ("--reporters", "-r", "reporters", "Reporters to use (console is default)"),
)

FLAG_OPTIONS = (
    ("--count", "-c", "count", "Print the number of matching test cases"),
    ("--list-test-cases", "-ltc", "list_test_cases", "List matching test cases by name"),
    ("--list-test-suites", "-lts", "list_test_suites", "List matching test suites"),
    ("--list-reporters", "-lr", "list_reporters", "List installed reporters and listeners"),
    ("--success", "-s", "success", "Include successful assertions in the output"),
    ("--case-sensitive", "-cs", "case_sensitive", "Treat filters as case sensitive"),
    ("--duration", "-d", "duration", "Print the duration of each test case"),
    ("--no-throw", "-nt", "no_throw", "Skip exception-related assertions"),
    ("--no-exitcode", "-ne", "no_exitcode", "Always exit with success"),
    ("--no-run", "-nr", "no_run", "Skip running the tests"),
    ("--no-version", "-nv", "no_version", "Omit the version in the output"),
    ("--no-intro", "-ni", "no_intro", "Do not print the intro"),
    ("--no-skip", "-ns", "no_skip", "Run test cases marked as skip"),
    ("--no-path-filenames", "-npf", "no_path_in_filenames", "Only file names, no paths"),
    ("--no-line-numbers", "-nln", "no_line_numbers", "Report 0 instead of line numbers"),
)


def parse_filters(value: str) -> Sequence[str]:
    """Parse comma-separated filter patterns."""
    if not value.strip():
        return ()
    return tuple(s.strip() for s in value.split(",") if s.strip())


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for every run option."""
    parser = argparse.ArgumentParser(
        prog="casewalk",
        description="Run test cases declared with casewalk",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Test files, or directories searched for test_*.py and *_test.py",
    )
    for long, short, dest, help_text in FILTER_OPTIONS:
        parser.add_argument(
            long, short, dest=dest, type=parse_filters, default=None, help=help_text
        )
    for long, short, dest, help_text in FLAG_OPTIONS:
        parser.add_argument(long, short, dest=dest, action="store_true", help=help_text)

    parser.add_argument(
        "--version", "-v", dest="version", action="store_true", help="Print the version"
    )
    parser.add_argument("--out", "-o", type=Path, help="Output file name")
    parser.add_argument(
        "--order-by",
        "-ob",
        choices=("file", "suite", "name", "rand"),
        default="file",
        help="How the test cases are ordered",
    )
    parser.add_argument("--rand-seed", "-rs", type=int, default=0, help="Seed for rand order")
    parser.add_argument(
        "--first",
        "-f",
        type=int,
        default=0,
        help="The first test case passing the filters to execute",
    )
    parser.add_argument(
        "--last",
        "-l",
        type=int,
        default=None,
        help="The last test case passing the filters to execute",
    )
    parser.add_argument(
        "--abort-after",
        "-aa",
        type=int,
        default=0,
        help="Stop after this many failed assertions",
    )
    parser.add_argument(
        "--subcase-filter-levels",
        "-scfl",
        type=int,
        default=None,
        help="Apply subcase filters for the first N levels",
    )
    parser.add_argument(
        "--gnu-file-line",
        "-gfl",
        action=argparse.BooleanOptionalAction,
        default=True,
        help=":n: vs (n): for line numbers in output",
    )
    parser.add_argument(
        "--fatal-guard",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Report crashes caused by fatal signals",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages to stderr",
    )
    return parser


def build_options(args: argparse.Namespace) -> RunOptions:
    """Turn parsed arguments into validated run options.

    Raises:
        ValidationError: If an option value is out of range

    """
    values: dict[str, Any] = {
        dest: getattr(args, dest) for _, _, dest, _ in FLAG_OPTIONS
    }
    for _, _, dest, _ in FILTER_OPTIONS:
        patterns = getattr(args, dest)
        if patterns is not None:
            values[dest] = patterns
    if args.subcase_filter_levels is not None:
        values["subcase_filter_levels"] = args.subcase_filter_levels
    values.update(
        version=args.version,
        out=args.out,
        order_by=args.order_by,
        rand_seed=args.rand_seed,
        first=args.first,
        last=args.last,
        abort_after=args.abort_after,
        gnu_file_line=args.gnu_file_line,
        fatal_guard=args.fatal_guard,
    )
    return RunOptions(**values)


def run(
    paths: Sequence[Path],
    options: RunOptions,
    registry: Registry = default_registry,
) -> int:
    """Import the test files, run their test cases and return the exit code."""
    log = logging.getLogger("casewalk")

    if paths and not (options.version or options.list_reporters):
        load_test_modules(paths)
    log.info("Registered test cases: %d", len(registry))

    return TestRunner(registry=registry, options=options).run()


def describe_validation_error(error: ValidationError) -> str:
    """Render pydantic errors as ``field: message`` pairs."""
    details: list[Mapping[str, Any]] = error.errors()  # type: ignore[assignment]
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or 'options'}: {detail['msg']}"
        for detail in details
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        options = build_options(args)
    except ValidationError as e:
        parser.error(describe_validation_error(e))

    try:
        exit_code = run(args.paths, options)
    except (DiscoveryError, ReporterNotFoundError) as e:
        logging.getLogger("casewalk").error("%s", e)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
