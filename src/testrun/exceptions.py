#
# src/testrun/exceptions.py
#
"""
Exception hierarchy for the testrun harness.

Errors raised by a test body are folded into per-test outcomes. Anything
deriving from HarnessFatalError means the harness itself is in an
inconsistent state and is mapped to process termination by the CLI.
"""

import unittest


class TestrunError(Exception):
    """Base class for all testrun errors."""

    def __init__(self, message: str, details: Exception | None = None):
        self.details = details
        super().__init__(message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConfigurationError(TestrunError):
    """Raised for invalid environment configuration or registry locations."""

    pass


class InvalidFreeError(TestrunError):
    """A test released memory it does not own, or released it twice."""

    pass


class HarnessFatalError(TestrunError):
    """Base class for conditions that abort the whole session."""

    pass


class TestIndexError(HarnessFatalError):
    """A registry index outside 0..len-1 was requested."""

    __test__ = False

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"test index {index} out of range for registry of {length} tests")


class InternalLeakError(HarnessFatalError):
    """Memory leaked while the harness was doing its own bookkeeping."""

    pass


class ScopeError(HarnessFatalError):
    """Resource tracking scopes were opened or closed out of order."""

    pass


class ProtocolError(HarnessFatalError):
    """The coordinator violated the message protocol."""

    pass


class FramingError(ProtocolError):
    """A message frame was truncated or had an invalid body length."""

    pass


class SkipTest(unittest.SkipTest):
    """Raise from a test body to mark the test as skipped."""

    pass

# 🔼⚙️
