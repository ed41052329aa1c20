# src/testrun/runtime/driver.py

"""
The sequential driver: walks the registry in order and folds every outcome
into the session. One class covers the full terminal reporter and the
degraded executors; they differ only in their capability flags.
"""

import time

import structlog
from attrs import define, field

from testrun.config import ExecutorKind
from testrun.runtime.engine import ExecutionEngine
from testrun.runtime.reporter import TerminalRenderer
from testrun.state import OutcomeStatus, SessionState

log = structlog.get_logger("testrun.runtime.driver")


@define(frozen=True, slots=True)
class DriverCapabilities:
    """What a sequential driver does besides running tests."""

    progress: bool = field(default=True)
    summary: bool = field(default=True)
    track_resources: bool = field(default=True)
    fail_fast: bool = field(default=False)

    @classmethod
    def full(cls) -> "DriverCapabilities":
        return cls()

    @classmethod
    def fail_fast_only(cls) -> "DriverCapabilities":
        return cls(progress=False, summary=False, track_resources=False, fail_fast=True)

    @classmethod
    def tally_only(cls, summary: bool = True) -> "DriverCapabilities":
        return cls(progress=False, summary=summary, track_resources=False, fail_fast=False)

    @classmethod
    def for_executor(cls, kind: ExecutorKind, tally_summary: bool = True) -> "DriverCapabilities":
        if kind is ExecutorKind.FAIL_FAST:
            return cls.fail_fast_only()
        if kind is ExecutorKind.TALLY:
            return cls.tally_only(summary=tally_summary)
        return cls.full()


class SequentialDriver:
    """
    Runs every registered test once, in registry order.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        capabilities: DriverCapabilities | None = None,
        renderer: TerminalRenderer | None = None,
    ):
        self.engine = engine
        self.capabilities = capabilities or DriverCapabilities.full()
        self.renderer = renderer or TerminalRenderer()
        self.session = SessionState(track_resources=self.capabilities.track_resources)

    def run_all(self) -> int:
        """
        Executes the registry and returns the process exit code.

        With `fail_fast` the first failing test's exception is re-raised and
        nothing after it runs.
        """
        caps = self.capabilities
        registry = self.engine.registry
        total = len(registry)
        log.debug("Starting sequential run", test_count=total, capabilities=str(caps))

        suite_start = time.perf_counter_ns()
        for index, case in registry.items():
            if caps.progress:
                self.renderer.test_started(index, total, case.name)

            outcome = self.engine.run(index)
            self.session.record(outcome)

            if caps.progress:
                self.renderer.test_finished(outcome)
            if outcome.status is OutcomeStatus.FAIL:
                self.engine.dump_trace(outcome)

            if caps.fail_fast and outcome.status is OutcomeStatus.FAIL and outcome.error is not None:
                log.debug("Stopping at first failure", index=index, test=case.name)
                raise outcome.error

        total_duration = time.perf_counter_ns() - suite_start

        if caps.summary:
            if caps.progress:
                self.renderer.summary(self.session.counters, total_duration)
            else:
                self.renderer.tally(self.session.counters)

        exit_code = self.session.exit_code
        log.debug(
            "Sequential run complete",
            exit_code=exit_code,
            passed=self.session.counters.passed,
            skipped=self.session.counters.skipped,
            failed=self.session.counters.failed,
        )
        return exit_code

# 🔼⚙️
