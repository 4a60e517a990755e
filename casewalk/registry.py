"""Registration of test cases and exception translators."""

import logging
from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass, field

from casewalk.models.data import TestBody, TestCaseData

log = logging.getLogger(__name__)

type ExceptionTranslator[E: BaseException] = Callable[[E], str]


@dataclass(frozen=True, kw_only=True)
class Decorators:
    """Behavioral decorators of a test case (or the defaults of a suite)."""

    description: str | None = None
    skip: bool = False
    may_fail: bool = False
    should_fail: bool = False
    expected_failures: int = 0
    timeout: float = 0.0


class Registry:
    """Collection of declared test cases, filled before a run starts."""

    def __init__(self) -> None:
        self._tests: list[TestCaseData] = []
        self._keys: set[tuple[str, int, str]] = set()
        self._translators: list[tuple[type[BaseException], ExceptionTranslator]] = []

    def __iter__(self) -> Iterator[TestCaseData]:
        return iter(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

    def register(self, test_case: TestCaseData) -> TestCaseData:
        """Add a test case; registering the same declaration twice is a no-op."""
        if test_case.key in self._keys:
            log.debug("Ignoring duplicate test case %s", test_case.name)
            return test_case
        self._keys.add(test_case.key)
        self._tests.append(test_case)
        log.debug(
            "Registered test case %s (%s:%d)",
            test_case.name,
            test_case.file,
            test_case.line,
        )
        return test_case

    def test_case(
        self,
        name: str | None = None,
        *,
        suite: str = "",
        description: str | None = None,
        skip: bool = False,
        may_fail: bool = False,
        should_fail: bool = False,
        expected_failures: int = 0,
        timeout: float = 0.0,
    ) -> Callable[[TestBody], TestBody]:
        """Decorator registering a function as a test case.

        The function receives the :class:`~casewalk.context.TestContext` of
        the running test and is returned unchanged. Coroutine functions are
        run to completion on a fresh event loop.
        """
        decorators = Decorators(
            description=description,
            skip=skip,
            may_fail=may_fail,
            should_fail=should_fail,
            expected_failures=expected_failures,
            timeout=timeout,
        )

        def decorator(func: TestBody) -> TestBody:
            self.register(_declare(func, name, suite, decorators))
            return func

        return decorator

    def test_suite(self, name: str, **decorators: object) -> "TestSuite":
        """Return a suite whose test cases share ``name`` and default decorators."""
        return TestSuite(registry=self, name=name, defaults=Decorators(**decorators))  # type: ignore[arg-type]

    def exception_translator[E: BaseException](
        self, exc_type: type[E]
    ) -> Callable[[ExceptionTranslator[E]], ExceptionTranslator[E]]:
        """Decorator registering a function that turns an exception into text."""

        def decorator(func: ExceptionTranslator[E]) -> ExceptionTranslator[E]:
            self._translators.append((exc_type, func))
            return func

        return decorator

    def translate(self, exc: BaseException) -> str:
        """Describe an exception with the most recently registered matching translator."""
        for exc_type, translator in reversed(self._translators):
            if isinstance(exc, exc_type):
                return translator(exc)
        return str(exc) or type(exc).__name__


@dataclass(frozen=True, kw_only=True)
class TestSuite:
    """Named group of test cases sharing default decorators."""

    __test__ = False

    registry: Registry
    name: str
    defaults: Decorators = field(default_factory=Decorators)

    def test_case(
        self, name: str | None = None, **overrides: object
    ) -> Callable[[TestBody], TestBody]:
        """Like :meth:`Registry.test_case`, with the suite's defaults applied."""
        decorators = {**asdict(self.defaults), **overrides}
        return self.registry.test_case(name, suite=self.name, **decorators)  # type: ignore[arg-type]


def _declare(
    func: TestBody, name: str | None, suite: str, decorators: Decorators
) -> TestCaseData:
    code = func.__code__
    return TestCaseData(
        file=code.co_filename,
        line=code.co_firstlineno,
        name=name or func.__name__,
        test_suite=suite,
        description=decorators.description,
        skip=decorators.skip,
        may_fail=decorators.may_fail,
        should_fail=decorators.should_fail,
        expected_failures=decorators.expected_failures,
        timeout=decorators.timeout,
        body=func,
    )


default_registry = Registry()
test_case = default_registry.test_case
test_suite = default_registry.test_suite
exception_translator = default_registry.exception_translator
