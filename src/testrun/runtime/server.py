# src/testrun/runtime/server.py

"""
Request/response loop that lets an external coordinator pick which tests
run and collect their results over framed stdin/stdout.
"""

import sys
from typing import BinaryIO, TextIO

import structlog

from testrun.protocol import InTag, MessageStream, OutTag, StringTable, TestMetadata, TestResults
from testrun.runtime.engine import ExecutionEngine
from testrun.state import OutcomeStatus, SessionState

log = structlog.get_logger("testrun.runtime.server")

EXIT_OK = 0
EXIT_UNSUPPORTED_MESSAGE = 1


class ProtocolServer:
    """
    Serves `exit`, `query_test_metadata` and `run_test` until told to stop.

    `serve()` returns the process exit code. Protocol violations that leave
    the harness in an unknown state (truncated frames, out-of-range
    indices, internal leaks) are raised as HarnessFatalError instead.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        inbound: BinaryIO,
        outbound: BinaryIO,
        version: str,
        diagnostics: TextIO | None = None,
    ):
        self.engine = engine
        self.stream = MessageStream(inbound, outbound)
        self.version = version
        self.session = SessionState()
        self._diagnostics = diagnostics

    @property
    def diagnostics(self) -> TextIO:
        return self._diagnostics if self._diagnostics is not None else sys.stderr

    def serve(self) -> int:
        self.stream.send(OutTag.HARNESS_VERSION, self.version.encode("utf-8"))

        while True:
            header = self.stream.receive_header()

            if header.tag == InTag.EXIT:
                self.stream.receive_body(header)
                log.debug("Exit requested by coordinator", **self._counters())
                return EXIT_OK

            if header.tag == InTag.QUERY_TEST_METADATA:
                self.stream.receive_body(header)
                self.serve_test_metadata()
            elif header.tag == InTag.RUN_TEST:
                index = self.stream.receive_body_u32(header)
                self.serve_test_results(index)
            else:
                self.diagnostics.write(f"unsupported message: {header.tag:x}")
                self.diagnostics.flush()
                log.error("Unsupported message tag from coordinator", tag=header.tag)
                return EXIT_UNSUPPORTED_MESSAGE

    def build_test_metadata(self) -> TestMetadata:
        """Describes the entire registry, built inside an internal tracking scope."""
        with self.engine.tracker.internal_scope() as alloc:
            table = StringTable.build(self.engine.registry.names)
            # Scratch storage comes from the scope allocator so a missing
            # release shows up as an internal leak.
            scratch = alloc.alloc(len(table.string_bytes))
            scratch[:] = table.string_bytes
            metadata = TestMetadata(
                names=table.offsets,
                expected_panic_msgs=[0] * len(table.offsets),
                string_bytes=bytes(scratch),
            )
            alloc.free(scratch)
        return metadata

    def serve_test_metadata(self) -> None:
        metadata = self.build_test_metadata()
        self.stream.send(OutTag.TEST_METADATA, metadata.encode())
        log.debug("Served test metadata", test_count=len(metadata.names))

    def serve_test_results(self, index: int) -> None:
        outcome = self.engine.run(index)
        self.session.record(outcome)
        if outcome.status is OutcomeStatus.FAIL:
            self.engine.dump_trace(outcome)
        results = TestResults(
            index=index,
            fail=outcome.status is OutcomeStatus.FAIL,
            skip=outcome.status is OutcomeStatus.SKIP,
            leak=outcome.leaked,
            log_err_count=outcome.log_error_count,
        )
        self.stream.send(OutTag.TEST_RESULTS, results.encode())

    def _counters(self) -> dict[str, int]:
        c = self.session.counters
        return {
            "passed": c.passed,
            "skipped": c.skipped,
            "failed": c.failed,
            "leaked": c.leaked,
            "log_errors": c.total_log_errors,
        }

# 🔼⚙️
