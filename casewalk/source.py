"""Source locations and literal expression text of assertions."""

import ast
import linecache
import sys
from types import FrameType

INTERNAL_MODULES = frozenset({"casewalk.assertions", "casewalk.context", __name__})


def caller_frame() -> FrameType:
    """Return the innermost frame outside of the assertion machinery."""
    frame = sys._getframe(1)
    while frame.f_back is not None and frame.f_globals.get("__name__") in INTERNAL_MODULES:
        frame = frame.f_back
    return frame


def call_arguments(line: str) -> str:
    """Extract the argument text of the first call on a source line.

    ``ok = t.check(size(x) == 2)  # note`` gives ``size(x) == 2``. A call
    continued on the following lines gives whatever follows the opening
    parenthesis. Only used when the interpreter records no column
    positions (``python -X no_debug_ranges``).
    """
    start = line.find("(")
    if start < 0:
        return line.strip()
    depth = 0
    for index in range(start, len(line)):
        char = line[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                return line[start + 1 : index].strip()
    return line[start + 1 :].strip()


def call_source(frame: FrameType) -> str | None:
    """Source text of the call ``frame`` is executing, or None if unknown."""
    positions = list(frame.f_code.co_positions())
    index = frame.f_lasti // 2
    if not 0 <= index < len(positions):
        return None
    lineno, end_lineno, col, end_col = positions[index]
    if lineno is None or end_lineno is None or col is None or end_col is None:
        return None

    lines = linecache.getlines(frame.f_code.co_filename, frame.f_globals)
    if end_lineno > len(lines):
        return None
    # column offsets count UTF-8 bytes
    selected = [line.encode() for line in lines[lineno - 1 : end_lineno]]
    if len(selected) == 1:
        return selected[0][col:end_col].decode()
    selected[0] = selected[0][col:]
    selected[-1] = selected[-1][:end_col]
    return b"".join(selected).decode()


def argument_text(source: str) -> str | None:
    """Text between the parentheses of the call expression ``source``.

    Arguments spread over several lines are joined with single spaces.
    Returns None if ``source`` is not a call.
    """
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError:
        return None
    call = tree.body
    if not isinstance(call, ast.Call):
        return None

    arguments: list[ast.expr | ast.keyword] = sorted(
        [*call.args, *call.keywords], key=lambda node: (node.lineno, node.col_offset)
    )
    if not arguments:
        return ""
    first, last = arguments[0], arguments[-1]
    span = ast.Tuple(
        elts=[],
        ctx=ast.Load(),
        lineno=first.lineno,
        col_offset=first.col_offset,
        end_lineno=last.end_lineno,
        end_col_offset=last.end_col_offset,
    )
    text = ast.get_source_segment(source, span)
    if text is None:
        return None
    return " ".join(part.strip() for part in text.splitlines())


def expression_text(frame: FrameType) -> str:
    """Literal source text of the assertion called from ``frame``."""
    source = call_source(frame)
    if source is not None:
        text = argument_text(source)
        if text is not None:
            return text
    line = linecache.getline(frame.f_code.co_filename, frame.f_lineno, frame.f_globals)
    return call_arguments(line) if line else ""
