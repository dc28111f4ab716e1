"""
Execution environments for samples

A Sandbox is a namespace that sample code is compiled and run in. Every
sandbox starts from the same fixed prelude:

    check         counting assertion object (see CountingAssert)
    require       import a module by name
    URL           split a URL into its components
    sleep         pause for a number of seconds
    perf_counter  monotonic timer
    module        placeholder with an ``exports`` attribute

Blocks without a context name get a brand new sandbox each time. Blocks
naming a context share one sandbox, created on first use and kept by the
SandboxManager for the rest of the document run.
"""

import importlib
import signal
import threading
import time
import unittest
import urllib.parse
from contextlib import contextmanager
from types import CodeType, SimpleNamespace
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from ..config import appsettings, AppSettings
from ..models.blocks import RESERVED_MODES
from .log import LOG


_MISSING = object()

# Host utilities bound into every sandbox next to the assertion object
PRELUDE_NAMES = ("require", "URL", "sleep", "perf_counter", "module")


class ExecutionTimeout(BaseException):
    """
    Raised inside a running sample when its wall-clock budget expires

    Derives from BaseException so ``except Exception`` in sample code does
    not swallow it.
    """

    def __init__(self, seconds: float) -> None:
        super().__init__(f"execution timed out after {seconds:g}s")
        self.seconds = seconds


class AssertionFailure(AssertionError):
    """
    A failed check, carrying the values involved

    Attributes:
        actual: Value the sample produced (unset for throws checks)
        expected: Value the assertion comment expected
        label: Original assertion line or comment text
    """

    def __init__(
        self,
        message: str,
        actual: Any = _MISSING,
        expected: Any = _MISSING,
        label: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.actual = actual
        self.expected = expected
        self.label = label

    @property
    def has_values(self) -> bool:
        return self.actual is not _MISSING and self.expected is not _MISSING


class AssertionCounter:
    """Monotonic count of successful checks for one document run"""

    def __init__(self) -> None:
        self.passed = 0

    def increment(self) -> None:
        self.passed += 1


class CountingAssert:
    """
    Assertion object bound into every sandbox

    Each method delegates to the matching ``unittest.TestCase`` assertion.
    A passing check increments the shared AssertionCounter; a failing one
    raises AssertionFailure with the actual and expected values attached.

    Example:
        >>> counter = AssertionCounter()
        >>> check = CountingAssert(counter)
        >>> check.equal(1 + 1, 2, "1 + 1  # => 2")
        >>> counter.passed
        1
    """

    def __init__(self, counter: AssertionCounter) -> None:
        self.counter = counter
        self._case = unittest.TestCase()
        self._case.maxDiff = None

    def _delegate(
        self,
        assertion: Callable[..., Any],
        *args: Any,
        label: Optional[str] = None,
        actual: Any = _MISSING,
        expected: Any = _MISSING,
    ) -> None:
        try:
            assertion(*args)
        except AssertionError as error:
            raise AssertionFailure(
                str(error), actual=actual, expected=expected, label=label
            ) from None
        self.counter.increment()

    def ok(self, value: Any, label: Optional[str] = None) -> None:
        self._delegate(self._case.assertTrue, value, label=label, actual=value, expected=True)

    def equal(self, actual: Any, expected: Any, label: Optional[str] = None) -> None:
        self._delegate(
            self._case.assertEqual, actual, expected,
            label=label, actual=actual, expected=expected,
        )

    def not_equal(self, actual: Any, unexpected: Any, label: Optional[str] = None) -> None:
        self._delegate(self._case.assertNotEqual, actual, unexpected, label=label)

    def throws(
        self,
        thunk: Callable[[], Any],
        label: Optional[str] = None,
        expected: type = Exception,
    ) -> None:
        self._delegate(self._case.assertRaises, expected, thunk, label=label)


@contextmanager
def deadline_enforce(seconds: float) -> Iterator[None]:
    """
    Raise ExecutionTimeout in the running code once ``seconds`` elapse

    Uses a SIGALRM interval timer, which only works on the main thread of
    platforms that have it; elsewhere the code runs unbounded.
    """
    if not hasattr(signal, "setitimer") or threading.current_thread() is not threading.main_thread():
        LOG("No interval timer available; running without a time budget", level=3)
        yield
        return

    def _raise_timeout(_signum: int, _frame: object) -> None:
        raise ExecutionTimeout(seconds)

    prev_handler = signal.getsignal(signal.SIGALRM)
    signal.signal(signal.SIGALRM, _raise_timeout)
    signal.setitimer(signal.ITIMER_REAL, seconds)
    try:
        yield
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(signal.SIGALRM, prev_handler)


class Sandbox:
    """
    Namespace samples are compiled for and executed in

    Attributes:
        name: Shared-context name, or None for an anonymous sandbox
        namespace: Globals dict the samples run against
    """

    def __init__(self, name: Optional[str], prelude: Dict[str, Any]) -> None:
        self.name = name
        self.namespace: Dict[str, Any] = dict(prelude)

    def __repr__(self) -> str:
        return f"Sandbox({self.name!r})"

    def compile(self, source: str, filename: str) -> CodeType:
        """Compile source for this sandbox; raises SyntaxError"""
        return compile(source, filename, "exec")

    def run(self, code: CodeType, timeout: float) -> None:
        """Execute compiled code in the namespace within the time budget"""
        self.run_all([code], timeout)

    def run_all(self, codes: Iterable[CodeType], timeout: float) -> None:
        """Execute code objects in order, all under one time budget"""
        with deadline_enforce(timeout):
            for code in codes:
                exec(code, self.namespace)


class SandboxManager:
    """
    Supplies sandboxes to blocks and keeps the named ones

    Attributes:
        settings: Application settings
        counter: AssertionCounter shared by every sandbox handed out
        registry: Named sandboxes created so far
        created: Total sandboxes created (anonymous and named)
    """

    def __init__(
        self,
        counter: Optional[AssertionCounter] = None,
        settings: AppSettings = appsettings,
    ) -> None:
        self.settings = settings
        self.counter = counter if counter is not None else AssertionCounter()
        self.registry: Dict[str, Sandbox] = {}
        self.created = 0

    def prelude_build(self) -> Dict[str, Any]:
        return {
            "__name__": "__main__",
            self.settings.assertion_name: CountingAssert(self.counter),
            "require": importlib.import_module,
            "URL": urllib.parse.urlsplit,
            "sleep": time.sleep,
            "perf_counter": time.perf_counter,
            "module": SimpleNamespace(exports=None),
        }

    def sandbox_create(self, name: Optional[str]) -> Sandbox:
        self.created += 1
        return Sandbox(name, self.prelude_build())

    def obtain(self, mode: Optional[str]) -> Sandbox:
        """
        Sandbox for a block with the given mode

        Args:
            mode: None for a fresh isolated sandbox, or a context name

        Returns:
            A new Sandbox (mode None, or first use of a name) or the
            registered one for that name

        Raises:
            ValueError: For the reserved modes "off" and "lint"
        """
        if mode is None:
            return self.sandbox_create(None)
        if mode in RESERVED_MODES:
            raise ValueError(f"blocks in mode {mode!r} do not get a sandbox")

        sandbox = self.registry.get(mode)
        if sandbox is None:
            sandbox = self.sandbox_create(mode)
            self.registry[mode] = sandbox
            LOG(f"Created shared sandbox {mode!r}", level=2)
        return sandbox
