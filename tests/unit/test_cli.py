"""Tests for CLI module."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from casewalk.cli import build_options, build_parser, main, parse_filters, run
from casewalk.discovery import DiscoveryError
from casewalk.models.options import RunOptions
from casewalk.registry import Registry
from casewalk.version import __version__


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", ()),
        ("  ", ()),
        ("parse*", ("parse*",)),
        ("a, b,,c ", ("a", "b", "c")),
    ],
)
def test_parse_filters(value: str, expected: tuple[str, ...]) -> None:
    """Splits comma-separated patterns and drops empty entries."""
    assert parse_filters(value) == expected


class TestBuildOptions:
    """Tests for build_options function."""

    def test_defaults(self) -> None:
        """Produces the default run options when no argument is given."""
        options = build_options(build_parser().parse_args([]))

        assert options == RunOptions()

    def test_filters_flags_and_values(self) -> None:
        """Maps every kind of argument onto the options model."""
        args = build_parser().parse_args(
            [
                "-tc",
                "parse*,load",
                "--source-file-exclude=*slow*",
                "-s",
                "-ob",
                "name",
                "-f",
                "2",
                "-l",
                "3",
                "-aa",
                "5",
                "-scfl",
                "1",
                "--no-gnu-file-line",
                "--no-fatal-guard",
                "-r",
                "xml,json",
                "tests",
            ]
        )

        options = build_options(args)

        assert args.paths == [Path("tests")]
        assert options.test_case == ("parse*", "load")
        assert options.source_file_exclude == ("*slow*",)
        assert options.success is True
        assert options.order_by == "name"
        assert (options.first, options.last, options.abort_after) == (2, 3, 5)
        assert options.subcase_filter_levels == 1
        assert options.gnu_file_line is False
        assert options.fatal_guard is False
        assert options.reporters == ("xml", "json")

    def test_empty_reporters_rejected(self) -> None:
        """Rejects a run without any reporter pattern."""
        with pytest.raises(ValueError, match="at least one reporter"):
            build_options(build_parser().parse_args(["-r", ""]))


class TestRun:
    """Tests for run function."""

    def test_loads_modules_and_runs(self) -> None:
        """Imports the test files before running the registered test cases."""
        registry = Registry()
        options = RunOptions()

        with (
            patch("casewalk.cli.load_test_modules") as mock_load,
            patch("casewalk.cli.TestRunner") as mock_runner_cls,
        ):
            mock_runner_cls.return_value.run = Mock(return_value=1)

            exit_code = run([Path("tests")], options, registry)

        assert exit_code == 1
        mock_load.assert_called_once_with([Path("tests")])
        mock_runner_cls.assert_called_once_with(registry=registry, options=options)

    def test_version_skips_loading(self) -> None:
        """Does not import test files when only the version is requested."""
        with (
            patch("casewalk.cli.load_test_modules") as mock_load,
            patch("casewalk.cli.TestRunner") as mock_runner_cls,
        ):
            mock_runner_cls.return_value.run = Mock(return_value=0)

            exit_code = run([Path("tests")], RunOptions(version=True), Registry())

        assert exit_code == 0
        mock_load.assert_not_called()


class TestMain:
    """Tests for main function."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Prints the version and exits with 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert f'casewalk version is "{__version__}"' in capsys.readouterr().out

    def test_exit_code_from_run(self) -> None:
        """Exits with the code returned by the run."""
        with (
            patch("casewalk.cli.run", return_value=1) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["-s", "tests"])

        assert exc_info.value.code == 1
        paths, options = mock_run.call_args.args
        assert paths == [Path("tests")]
        assert options.success is True

    def test_invalid_option_value(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Reports out of range values as usage errors."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--first", "-1"])

        assert exc_info.value.code == 2
        assert "first: Input should be greater than or equal to 0" in capsys.readouterr().err

    def test_discovery_error(self, caplog: pytest.LogCaptureFixture) -> None:
        """Logs discovery errors and exits with 2."""
        with (
            patch("casewalk.cli.run", side_effect=DiscoveryError("Test path not found: x")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["x"])

        assert exc_info.value.code == 2
        assert "Test path not found: x" in caplog.text
