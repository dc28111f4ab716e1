"""
Sandbox tests

Tests isolated vs shared sandboxes, the fixed prelude, the counting
assertion object and the wall-clock budget.
"""

import signal

import pytest

from adoctest.lib.sandbox import (
    AssertionCounter,
    AssertionFailure,
    CountingAssert,
    ExecutionTimeout,
    PRELUDE_NAMES,
    SandboxManager,
)


class TestObtain:
    """SandboxManager.obtain semantics"""

    def test_unnamed_always_fresh(self):
        manager = SandboxManager()
        first = manager.obtain(None)
        second = manager.obtain(None)

        assert first is not second
        assert first.namespace is not second.namespace
        assert manager.registry == {}

    def test_named_created_once(self):
        manager = SandboxManager()
        first = manager.obtain("ctx")
        second = manager.obtain("ctx")

        assert first is second
        assert manager.registry == {"ctx": first}
        assert manager.created == 1

    def test_different_names_are_separate(self):
        manager = SandboxManager()
        assert manager.obtain("a") is not manager.obtain("b")

    @pytest.mark.parametrize("mode", ["off", "lint"])
    def test_reserved_modes_rejected(self, mode):
        with pytest.raises(ValueError):
            SandboxManager().obtain(mode)

    def test_managers_do_not_share_registries(self):
        one = SandboxManager()
        other = SandboxManager()
        assert one.obtain("ctx") is not other.obtain("ctx")


class TestPrelude:
    """Fixed set of names bound into every sandbox"""

    def test_prelude_names_present(self):
        namespace = SandboxManager().obtain(None).namespace

        assert isinstance(namespace["check"], CountingAssert)
        for name in PRELUDE_NAMES:
            assert name in namespace
        assert namespace["__name__"] == "__main__"
        assert namespace["module"].exports is None

    def test_require_imports_modules(self):
        sandbox = SandboxManager().obtain(None)
        sandbox.run(sandbox.compile("m = require('math')", "<sample>"), timeout=5)
        assert sandbox.namespace["m"].pi > 3

    def test_all_sandboxes_share_counter(self):
        manager = SandboxManager()
        for mode in (None, "ctx"):
            sandbox = manager.obtain(mode)
            sandbox.run(sandbox.compile("check.equal(1, 1)", "<sample>"), timeout=5)
        assert manager.counter.passed == 2

    def test_bindings_persist_in_named_sandbox(self):
        manager = SandboxManager()
        sandbox = manager.obtain("ctx")
        sandbox.run(sandbox.compile("x = 1", "<sample>"), timeout=5)

        assert manager.obtain("ctx").namespace["x"] == 1
        assert "x" not in manager.obtain(None).namespace


class TestCountingAssert:
    """Assertion object delegating to unittest"""

    def test_equal_passes_and_counts(self):
        counter = AssertionCounter()
        CountingAssert(counter).equal(1 + 1, 2)
        assert counter.passed == 1

    def test_equal_failure_carries_values(self):
        counter = AssertionCounter()
        with pytest.raises(AssertionFailure) as info:
            CountingAssert(counter).equal(2, 3, "1 + 1  # => 3")

        assert info.value.actual == 2
        assert info.value.expected == 3
        assert info.value.label == "1 + 1  # => 3"
        assert info.value.has_values
        assert counter.passed == 0

    def test_assertion_failure_is_assertion_error(self):
        with pytest.raises(AssertionError):
            CountingAssert(AssertionCounter()).ok(False)

    def test_throws_passes_on_exception(self):
        counter = AssertionCounter()
        CountingAssert(counter).throws(lambda: int("x"))
        assert counter.passed == 1

    def test_throws_fails_without_exception(self):
        counter = AssertionCounter()
        with pytest.raises(AssertionFailure) as info:
            CountingAssert(counter).throws(lambda: int("1"), "int('1')  # !raises")

        assert not info.value.has_values
        assert info.value.label == "int('1')  # !raises"
        assert counter.passed == 0

    def test_not_equal(self):
        counter = AssertionCounter()
        CountingAssert(counter).not_equal(1, 2)
        assert counter.passed == 1


class TestTimeBudget:
    """Wall-clock limit on running code"""

    def test_infinite_loop_times_out(self):
        sandbox = SandboxManager().obtain(None)
        code = sandbox.compile("while True:\n    pass", "<sample>")

        with pytest.raises(ExecutionTimeout):
            sandbox.run(code, timeout=0.2)

    def test_sample_cannot_swallow_timeout(self):
        sandbox = SandboxManager().obtain(None)
        code = sandbox.compile(
            "try:\n    while True:\n        pass\nexcept Exception:\n    caught = True",
            "<sample>",
        )

        with pytest.raises(ExecutionTimeout):
            sandbox.run(code, timeout=0.2)
        assert "caught" not in sandbox.namespace

    def test_one_budget_for_all_parts(self):
        """Parts that each fit the budget still time out together"""
        sandbox = SandboxManager().obtain(None)
        first = sandbox.compile("sleep(0.3)", "<sample>")
        second = sandbox.compile("sleep(0.3)\nfinished = True", "<sample>")

        with pytest.raises(ExecutionTimeout):
            sandbox.run_all([first, second], timeout=0.5)
        assert "finished" not in sandbox.namespace

    def test_alarm_handler_restored(self):
        before = signal.getsignal(signal.SIGALRM)
        sandbox = SandboxManager().obtain(None)
        sandbox.run(sandbox.compile("x = 1", "<sample>"), timeout=1)
        assert signal.getsignal(signal.SIGALRM) == before
