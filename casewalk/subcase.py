"""Traversal of the subcase tree of a test case by re-invocation.

A test body may enter named subcases, nested arbitrarily and discovered only
while it runs. The body is invoked again and again; every invocation
descends into exactly one not yet completed leaf path and skips the
siblings of the subcases it entered. Completed leaf paths are memoized so
the next invocation takes a different route. The loop ends when an
invocation skipped no sibling.
"""

import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Protocol

from casewalk.filters import subcase_passes_filters
from casewalk.models.data import SubcaseSignature
from casewalk.models.options import RunOptions

log = logging.getLogger(__name__)

type SubcasePath = tuple[SubcaseSignature, ...]


@dataclass(kw_only=True)
class SubcaseTracker:
    """Subcase stack, passed-path memo and re-entry bookkeeping."""

    stack: list[SubcaseSignature] = field(default_factory=list)
    passed: set[SubcasePath] = field(default_factory=set)
    current_max_level: int = 0
    should_reenter: bool = False

    def reset_test_case(self) -> None:
        self.passed.clear()
        self.reset_invocation()

    def reset_invocation(self) -> None:
        self.stack.clear()
        self.current_max_level = 0
        self.should_reenter = False

    @property
    def path(self) -> SubcasePath:
        return tuple(self.stack)

    def enter(self, signature: SubcaseSignature, options: RunOptions) -> bool:
        """Decide whether the subcase body runs in this invocation.

        Returns:
            True if the subcase was entered; it must be paired with
            :meth:`leave`.

        """
        if len(self.stack) < options.subcase_filter_levels and not (
            subcase_passes_filters(signature.name, options)
        ):
            return False

        # a sibling on this level was already entered during this invocation
        if len(self.stack) < self.current_max_level:
            self.should_reenter = True
            return False

        self.stack.append(signature)
        if self.path in self.passed:
            self.stack.pop()
            return False

        self.current_max_level = len(self.stack)
        return True

    def leave(self) -> None:
        """Close an entered subcase, memoizing its path if it was a leaf."""
        if not self.should_reenter:
            self.passed.add(self.path)
        self.stack.pop()


class SubcaseHost(Protocol):
    """What a subcase needs from the running test."""

    @property
    def options(self) -> RunOptions: ...

    @property
    def subcases(self) -> SubcaseTracker: ...

    def subcase_started(self, signature: SubcaseSignature) -> None: ...

    def subcase_ended(self) -> None: ...

    def exception_in_subcase(self, exc: Exception) -> None: ...


class Subcase:
    """Context manager marking a subcase inside a test body.

    The body of the ``with`` block must check the entered flag::

        with t.subcase("empty input") as entered:
            if entered:
                ...
    """

    def __init__(self, host: SubcaseHost, signature: SubcaseSignature) -> None:
        self._host = host
        self.signature = signature
        self.entered = False

    def __bool__(self) -> bool:
        return self.entered

    def __enter__(self) -> "Subcase":
        self.entered = self._host.subcases.enter(self.signature, self._host.options)
        if self.entered:
            log.debug("Entering subcase %s", self.signature.name)
            self._host.subcase_started(self.signature)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # the stack is already unwound when a crash was reported
        if not self.entered or not self._host.subcases.stack:
            return
        self._host.subcases.leave()
        if isinstance(exc, Exception):
            self._host.exception_in_subcase(exc)
        self._host.subcase_ended()

