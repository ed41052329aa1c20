# src/testrun/state.py
#
"""
Per-run outcomes and the session-scoped counters the active driver owns.
"""

from enum import Enum, auto

import structlog
from attrs import define, field, mutable

log: structlog.stdlib.BoundLogger = structlog.get_logger("testrun.state")


class OutcomeStatus(Enum):
    """Classification of a single test run."""

    PASS = auto()
    SKIP = auto()
    FAIL = auto()


STATUS_GLYPH_MAP = {
    OutcomeStatus.PASS: "✔",
    OutcomeStatus.SKIP: "⚠",
    OutcomeStatus.FAIL: "✘",
}


@define(frozen=True, slots=True)
class ExecutionOutcome:
    """
    Result of running one test case once. Never reused across runs.
    """

    index: int = field()
    name: str = field()
    status: OutcomeStatus = field()
    leaked: bool = field(default=False)
    log_error_count: int = field(default=0)
    duration_ns: int = field(default=0)
    error: Exception | None = field(default=None, eq=False)

    @property
    def passed(self) -> bool:
        return self.status is OutcomeStatus.PASS

    @property
    def skipped(self) -> bool:
        return self.status is OutcomeStatus.SKIP

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAIL

    @property
    def duration_ms(self) -> int:
        return self.duration_ns // 1_000_000

    @property
    def glyph(self) -> str:
        return STATUS_GLYPH_MAP[self.status]


@mutable(slots=True)
class SessionCounters:
    """Monotonic tallies for one session (one process invocation)."""

    passed: int = field(default=0)
    skipped: int = field(default=0)
    failed: int = field(default=0)
    leaked: int = field(default=0)
    total_log_errors: int = field(default=0)


@mutable(slots=True)
class SessionState:
    """
    Holds the counters for the active driver and folds outcomes into them.

    `track_resources` controls whether leaks and logged errors are counted;
    the degraded executors turn it off.
    """

    track_resources: bool = field(default=True)
    counters: SessionCounters = field(factory=SessionCounters)
    visited: list[int] = field(factory=list)

    def record(self, outcome: ExecutionOutcome) -> None:
        """Folds a fresh outcome into the session tallies."""
        counters = self.counters
        if outcome.status is OutcomeStatus.PASS:
            counters.passed += 1
        elif outcome.status is OutcomeStatus.SKIP:
            counters.skipped += 1
        else:
            counters.failed += 1

        if self.track_resources:
            if outcome.leaked:
                counters.leaked += 1
            counters.total_log_errors += outcome.log_error_count

        self.visited.append(outcome.index)
        log.debug(
            "Recorded test outcome",
            index=outcome.index,
            status=outcome.status.name,
            leaked=outcome.leaked,
            log_errors=outcome.log_error_count,
        )

    @property
    def succeeded(self) -> bool:
        c = self.counters
        if not self.track_resources:
            return c.failed == 0
        return c.failed == 0 and c.leaked == 0 and c.total_log_errors == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

# 🔼⚙️
