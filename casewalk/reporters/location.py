"""Rendering of source locations shared by the text-based reporters."""

from pathlib import PurePath

from casewalk.models.options import RunOptions


def display_file(file: str, options: RunOptions) -> str:
    """Return the file name as reporters show it."""
    if options.no_path_in_filenames:
        return PurePath(file).name
    return file


def display_line(line: int, options: RunOptions) -> int:
    return 0 if options.no_line_numbers else line


def file_line(file: str, line: int, options: RunOptions) -> str:
    """Format ``file:line:`` (GNU style) or ``file(line):``."""
    shown = display_line(line, options)
    if options.gnu_file_line:
        return f"{display_file(file, options)}:{shown}:"
    return f"{display_file(file, options)}({shown}):"
