# src/testrun/tracking/tracker.py

"""
Scoped isolation of one unit of work: a fresh allocator and a zeroed
log-error counter on entry, a leak check on exit.
"""

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from attrs import define

from testrun.exceptions import InternalLeakError, ScopeError
from testrun.tracking.allocator import TrackingAllocator
from testrun.tracking.interceptor import LogInterceptor

log = structlog.get_logger("testrun.tracking.tracker")

_current_allocator: contextvars.ContextVar[TrackingAllocator | None] = contextvars.ContextVar(
    "testrun_current_allocator", default=None
)


def allocator() -> TrackingAllocator:
    """
    Returns the allocator of the scope currently running.

    Test bodies call this the way they would reach for a testing allocator;
    calling it outside a scope is a harness misuse.
    """
    current = _current_allocator.get()
    if current is None:
        raise ScopeError("No resource tracking scope is active; allocator() is only valid inside a test")
    return current


@define(frozen=True, slots=True)
class ScopeReport:
    leaked: bool
    leak_count: int = 0
    leaked_bytes: int = 0
    log_error_count: int = 0


class ResourceTracker:
    """
    Owns the allocation-tracking context and the log interceptor for a session.

    Exactly one scope may be open at a time. Internal scopes (harness
    bookkeeping rather than test bodies) treat a leak as fatal.
    """

    def __init__(self, interceptor: LogInterceptor | None = None):
        self.interceptor = interceptor or LogInterceptor()
        self._allocator: TrackingAllocator | None = None
        self._token: contextvars.Token | None = None
        self._internal = False

    @property
    def active(self) -> bool:
        return self._allocator is not None

    def begin_scope(self, internal: bool = False) -> TrackingAllocator:
        if self._allocator is not None:
            raise ScopeError("begin_scope() called while another scope is still open")
        self._allocator = TrackingAllocator()
        self._token = _current_allocator.set(self._allocator)
        self._internal = internal
        self.interceptor.reset()
        self.interceptor.counting = True
        return self._allocator

    def end_scope(self) -> ScopeReport:
        if self._allocator is None or self._token is None:
            raise ScopeError("end_scope() called without a matching begin_scope()")

        current, internal = self._allocator, self._internal
        _current_allocator.reset(self._token)
        self._allocator = None
        self._token = None
        self._internal = False
        self.interceptor.counting = False
        log_error_count = self.interceptor.reset()

        leaked = current.deinit()
        leaked_bytes = sum(record.size for record in leaked)
        for record in leaked:
            log.warning(
                "Memory address leaked",
                size=record.size,
                allocated_at="\n" + record.format_stack(),
            )

        if leaked and internal:
            raise InternalLeakError(
                f"internal test runner memory leak ({len(leaked)} allocations, {leaked_bytes} bytes)"
            )

        return ScopeReport(
            leaked=bool(leaked),
            leak_count=len(leaked),
            leaked_bytes=leaked_bytes,
            log_error_count=log_error_count,
        )

    @contextmanager
    def internal_scope(self) -> Iterator[TrackingAllocator]:
        """Wraps harness bookkeeping; a leak inside raises InternalLeakError on exit."""
        alloc = self.begin_scope(internal=True)
        try:
            yield alloc
        finally:
            self.end_scope()

# 🔼⚙️
