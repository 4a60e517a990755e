"""Reporting of fatal conditions that end the process during a test.

A guard is installed around every invocation of a test body. When a
terminating signal arrives, the guard restores the previous handlers, lets
the run report a crash to every sink and raises the signal again, so the
process ends the way it would have without the guard. Hardware faults such
as SIGSEGV cannot run Python code safely; for those the guard enables
:mod:`faulthandler`, which dumps the Python traceback before the default
disposition terminates the process.
"""

import faulthandler
import logging
import signal
import threading
from collections.abc import Callable, Mapping
from types import FrameType, TracebackType
from typing import Protocol, Self

log = logging.getLogger(__name__)

type FatalHandler = Callable[[str], None]

SIGNAL_DESCRIPTIONS: Mapping[str, str] = {
    "SIGINT": "SIGINT - Terminal interrupt signal",
    "SIGTERM": "SIGTERM - Termination request signal",
    "SIGABRT": "SIGABRT - Abort (abnormal termination) signal",
}


class FatalConditionError(BaseException):
    """Raised in the test body when the previous handler let a fatal signal pass.

    The crash has already been reported; the run stops without executing
    further tests.
    """


class FatalGuard(Protocol):
    """Scoped installation of crash handlers."""

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    def reset(self) -> None:
        """Restore the previous handlers; idempotent."""
        ...


class NullFatalGuard:
    """Guard for platforms or threads where handlers cannot be installed."""

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None

    def reset(self) -> None:
        return None


class SignalFatalGuard:
    """Guard backed by :mod:`signal` handlers and :mod:`faulthandler`."""

    def __init__(self, on_fatal: FatalHandler) -> None:
        self._on_fatal = on_fatal
        self._previous: dict[int, signal.Handlers | Callable | int | None] = {}
        self._enabled_faulthandler = False
        self._names = {
            int(getattr(signal, name)): description
            for name, description in SIGNAL_DESCRIPTIONS.items()
            if hasattr(signal, name)
        }

    def __enter__(self) -> Self:
        for signum in self._names:
            self._previous[signum] = signal.signal(signum, self._handle)
        if not faulthandler.is_enabled():
            faulthandler.enable()
            self._enabled_faulthandler = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.reset()

    def reset(self) -> None:
        for signum, previous in self._previous.items():
            # handlers installed outside Python are reported as None
            signal.signal(signum, signal.SIG_DFL if previous is None else previous)
        self._previous.clear()
        if self._enabled_faulthandler:
            faulthandler.disable()
            self._enabled_faulthandler = False

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        name = self._names.get(signum, "<unknown signal>")
        self.reset()
        log.error("Fatal condition during test: %s", name)
        self._on_fatal(name)
        signal.raise_signal(signum)
        raise FatalConditionError(name)


def make_fatal_guard(on_fatal: FatalHandler, enabled: bool = True) -> FatalGuard:
    """Pick the guard backend for the calling thread."""
    if not enabled or threading.current_thread() is not threading.main_thread():
        return NullFatalGuard()
    return SignalFatalGuard(on_fatal)
