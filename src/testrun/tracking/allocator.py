# src/testrun/tracking/allocator.py

"""
A leak-checking allocator handed to test bodies through `testrun.allocator()`.
"""

import traceback

import structlog
from attrs import define, field, mutable

from testrun.exceptions import InvalidFreeError

log = structlog.get_logger("testrun.tracking.allocator")


@define(frozen=True, slots=True)
class AllocationRecord:
    size: int
    stack: traceback.StackSummary = field(eq=False, repr=False)

    def format_stack(self) -> str:
        return "".join(self.stack.format())


@mutable(slots=True)
class TrackingAllocator:
    """
    Hands out bytearrays and remembers every one that has not been freed.
    """

    _live: dict[int, tuple[bytearray, AllocationRecord]] = field(factory=dict, init=False)
    total_allocations: int = field(default=0, init=False)

    def alloc(self, size: int) -> bytearray:
        if size < 0:
            raise ValueError(f"allocation size must be non-negative, got {size}")
        buf = bytearray(size)
        # Drop this frame so the recorded stack ends at the caller.
        stack = traceback.StackSummary.from_list(traceback.extract_stack()[:-1])
        self._live[id(buf)] = (buf, AllocationRecord(size=size, stack=stack))
        self.total_allocations += 1
        return buf

    def free(self, buf: bytearray) -> None:
        entry = self._live.get(id(buf))
        if entry is None or entry[0] is not buf:
            log.debug("Rejected free of untracked buffer", size=len(buf), live=len(self._live))
            raise InvalidFreeError("Invalid free: buffer is not owned by this allocator or was already freed")
        del self._live[id(buf)]

    def realloc(self, buf: bytearray, new_size: int) -> bytearray:
        """Returns a new buffer of `new_size` holding the old contents; the old one is released."""
        self.free(buf)
        new_buf = self.alloc(new_size)
        keep = min(len(buf), new_size)
        new_buf[:keep] = buf[:keep]
        return new_buf

    def dupe(self, data: bytes) -> bytearray:
        buf = self.alloc(len(data))
        buf[:] = data
        return buf

    @property
    def live_count(self) -> int:
        return len(self._live)

    @property
    def live_bytes(self) -> int:
        return sum(record.size for _, record in self._live.values())

    def leaks(self) -> list[AllocationRecord]:
        return [record for _, record in self._live.values()]

    def deinit(self) -> list[AllocationRecord]:
        """Releases all bookkeeping and returns the allocations that were never freed."""
        leaked = self.leaks()
        self._live.clear()
        return leaked

# 🔼⚙️
