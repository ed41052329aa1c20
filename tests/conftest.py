import io
import logging
from collections.abc import Iterator

import pytest

from testrun.exceptions import SkipTest
from testrun.registry import TestCase, TestRegistry
from testrun.runtime import ExecutionEngine
from testrun.tracking import LogInterceptor, ResourceTracker, allocator


def passing_test() -> None:
    buf = allocator().alloc(16)
    allocator().free(buf)


def skipping_test() -> None:
    raise SkipTest("not on this platform")


def failing_test() -> None:
    raise AssertionError("expected 1, found 2")


def leaking_test() -> None:
    allocator().alloc(32)


def error_logging_test() -> None:
    logging.getLogger("demo").error("something went wrong")


def warning_logging_test() -> None:
    logging.getLogger("demo").warning("just a heads up")


@pytest.fixture
def diagnostics() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def interceptor(diagnostics: io.StringIO) -> Iterator[LogInterceptor]:
    handler = LogInterceptor(display_level=logging.WARNING, stream=diagnostics)
    root = logging.getLogger()
    old_level = root.level
    handler.install(root)
    yield handler
    handler.uninstall(root)
    root.setLevel(old_level)


@pytest.fixture
def tracker(interceptor: LogInterceptor) -> ResourceTracker:
    return ResourceTracker(interceptor)


@pytest.fixture
def make_engine(tracker: ResourceTracker, diagnostics: io.StringIO):
    def _make(*cases: TestCase) -> ExecutionEngine:
        return ExecutionEngine(TestRegistry(cases), tracker, diagnostics=diagnostics)

    return _make


@pytest.fixture
def mixed_registry() -> TestRegistry:
    return TestRegistry(
        [
            TestCase("pass", passing_test),
            TestCase("skip", skipping_test),
            TestCase("fail", failing_test),
            TestCase("leak", leaking_test),
            TestCase("log_error", error_logging_test),
        ]
    )
