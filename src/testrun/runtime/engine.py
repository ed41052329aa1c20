# src/testrun/runtime/engine.py

"""
Runs a single registered test inside a resource tracking scope and
classifies what happened.
"""

import sys
import time
import traceback
import unittest
from typing import TextIO

import structlog

from testrun.exceptions import HarnessFatalError
from testrun.registry import TestRegistry
from testrun.state import ExecutionOutcome, OutcomeStatus
from testrun.tracking import ResourceTracker

log = structlog.get_logger("testrun.runtime.engine")


class ExecutionEngine:
    """
    Turns a registry index into a fresh ExecutionOutcome.

    The engine keeps no memory between runs: running the same index twice
    executes it twice, each time from a clean scope.
    """

    def __init__(
        self,
        registry: TestRegistry,
        tracker: ResourceTracker,
        diagnostics: TextIO | None = None,
    ):
        self.registry = registry
        self.tracker = tracker
        self._diagnostics = diagnostics

    @property
    def diagnostics(self) -> TextIO:
        return self._diagnostics if self._diagnostics is not None else sys.stderr

    def run(self, index: int) -> ExecutionOutcome:
        case = self.registry.get(index)
        run_log = log.bind(index=index, test=case.name)

        start = time.perf_counter_ns()
        status = OutcomeStatus.PASS
        error: Exception | None = None

        self.tracker.begin_scope()
        try:
            case.run()
        except HarnessFatalError:
            raise
        except unittest.SkipTest:
            status = OutcomeStatus.SKIP
        except Exception as e:
            status = OutcomeStatus.FAIL
            error = e
        finally:
            report = self.tracker.end_scope()

        duration_ns = time.perf_counter_ns() - start
        run_log.debug(
            "Test finished",
            status=status.name,
            leaked=report.leaked,
            log_errors=report.log_error_count,
            duration_ns=duration_ns,
        )
        return ExecutionOutcome(
            index=index,
            name=case.name,
            status=status,
            leaked=report.leaked,
            log_error_count=report.log_error_count,
            duration_ns=duration_ns,
            error=error,
        )

    def dump_trace(self, outcome: ExecutionOutcome) -> None:
        """Best-effort traceback for a failed outcome; never fails the run itself."""
        error = outcome.error
        if error is None:
            return
        try:
            traceback.print_exception(type(error), error, error.__traceback__, file=self.diagnostics)
            self.diagnostics.flush()
        except Exception as e:
            log.debug("Unable to dump failure trace", error=str(e))

# 🔼⚙️
