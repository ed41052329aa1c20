#
# tests/unit/test_cli.py
#
"""
Tests for the process entry point: argument contract, modes and exit codes.
"""

import logging
import struct
import sys
import types
from collections.abc import Iterator

import click
import pytest
from click.testing import CliRunner
from conftest import error_logging_test, failing_test, leaking_test, passing_test, skipping_test

import testrun
from testrun.cli.main import cli
from testrun.cli.utils import FATAL_EXIT_CODE
from testrun.protocol import InTag, OutTag, TestResults
from testrun.registry import TestCase, TestRegistry


def frame(tag: int, body: bytes = b"") -> bytes:
    return struct.pack("<II", tag, len(body)) + body


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def calls() -> list[str]:
    return []


@pytest.fixture
def recording_registry(calls: list[str]) -> TestRegistry:
    def first() -> None:
        calls.append("first")

    def second() -> None:
        calls.append("second")

    return TestRegistry([TestCase("first", first), TestCase("second", second)])


class TestArgumentContract:
    @pytest.mark.parametrize(
        "args",
        [
            ["--verbose"],
            ["extra"],
            ["--listen=foo"],
            ["--help"],
            ["--listen=-", "more"],
            ["--listen", "-"],
            ["--listen=-", "--listen=-"],
            ["--"],
        ],
    )
    def test_other_arguments_abort_before_running(
        self, runner: CliRunner, recording_registry: TestRegistry, calls: list[str], args: list[str]
    ) -> None:
        result = runner.invoke(cli, args, obj={"REGISTRY": recording_registry})

        assert result.exit_code == 2
        assert calls == []

    def test_split_listen_form_does_not_serve(self, runner: CliRunner, recording_registry: TestRegistry) -> None:
        result = runner.invoke(
            cli, ["--listen", "-"], obj={"REGISTRY": recording_registry}, input=frame(InTag.EXIT)
        )

        assert result.exit_code == 2
        assert result.stdout_bytes == b""

    def test_bad_environment_is_fatal(
        self, runner: CliRunner, recording_registry: TestRegistry, calls: list[str]
    ) -> None:
        result = runner.invoke(
            cli, [], obj={"REGISTRY": recording_registry}, env={"TESTRUN_EXECUTOR": "sometimes"}
        )

        assert result.exit_code == FATAL_EXIT_CODE
        assert "fatal:" in result.output
        assert calls == []

    def test_missing_registry_is_fatal(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [], obj={}, env={"TESTRUN_REGISTRY": None})

        assert result.exit_code == FATAL_EXIT_CODE
        assert "TESTRUN_REGISTRY" in result.output


class TestTerminalMode:
    def test_all_passing(self, runner: CliRunner, recording_registry: TestRegistry, calls: list[str]) -> None:
        result = runner.invoke(cli, [], obj={"REGISTRY": recording_registry})

        assert result.exit_code == 0
        assert calls == ["first", "second"]
        assert "1/2 first" in result.output
        assert "2/2 second" in result.output
        assert "2 passed" in result.output

    @pytest.mark.parametrize("test_fn", [failing_test, leaking_test, error_logging_test])
    def test_failure_leak_or_logged_error_exits_one(self, runner: CliRunner, test_fn) -> None:
        registry = TestRegistry([TestCase("ok", passing_test), TestCase("bad", test_fn)])

        result = runner.invoke(cli, [], obj={"REGISTRY": registry})

        assert result.exit_code == 1

    def test_skip_does_not_fail(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("skip", skipping_test)])
        result = runner.invoke(cli, [], obj={"REGISTRY": registry})

        assert result.exit_code == 0
        assert "SKIP skip" in result.output

    def test_registry_from_environment(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        module = types.ModuleType("cli_registry_mod")
        module.TESTS = [TestCase("from_env", passing_test)]
        monkeypatch.setitem(sys.modules, "cli_registry_mod", module)

        result = runner.invoke(cli, [], obj={}, env={"TESTRUN_REGISTRY": "cli_registry_mod:TESTS"})

        assert result.exit_code == 0
        assert "from_env" in result.output


class TestDegradedModes:
    def test_fail_fast(self, runner: CliRunner, calls: list[str]) -> None:
        def after() -> None:
            calls.append("after")

        registry = TestRegistry([TestCase("bad", failing_test), TestCase("after", after)])
        result = runner.invoke(cli, [], obj={"REGISTRY": registry}, env={"TESTRUN_EXECUTOR": "fail-fast"})

        assert result.exit_code == 1
        assert calls == []
        assert "test failure: AssertionError" in result.output

    def test_tally_ignores_leaks(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("leak", leaking_test), TestCase("skip", skipping_test)])
        result = runner.invoke(cli, [], obj={"REGISTRY": registry}, env={"TESTRUN_EXECUTOR": "tally"})

        assert result.exit_code == 0
        assert "1 passed, 1 skipped, 0 failed" in result.output

    def test_tally_counts_failures(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("bad", failing_test), TestCase("ok", passing_test)])
        result = runner.invoke(
            cli,
            [],
            obj={"REGISTRY": registry},
            env={"TESTRUN_EXECUTOR": "tally", "TESTRUN_TALLY_SUMMARY": "false"},
        )

        assert result.exit_code == 1
        assert "1 passed" not in result.output


class TestServerMode:
    def test_serves_over_process_byte_streams(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        def deprecated(name: str):
            raise AssertionError(f"get_binary_stream({name!r}) should not be used")

        monkeypatch.setattr(click, "get_binary_stream", deprecated, raising=False)
        registry = TestRegistry([TestCase("ok", passing_test)])

        result = runner.invoke(cli, ["--listen=-"], obj={"REGISTRY": registry}, input=frame(InTag.EXIT))

        assert result.exit_code == 0
        assert struct.unpack_from("<I", result.stdout_bytes, 0)[0] == OutTag.HARNESS_VERSION

    def test_listen_serves_until_exit(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("ok", passing_test)])
        requests = frame(InTag.RUN_TEST, struct.pack("<I", 0)) + frame(InTag.EXIT)

        result = runner.invoke(cli, ["--listen=-"], obj={"REGISTRY": registry}, input=requests)

        assert result.exit_code == 0
        data = result.stdout_bytes
        tag, length = struct.unpack_from("<II", data, 0)
        assert tag == OutTag.HARNESS_VERSION
        offset = 8 + length
        tag, length = struct.unpack_from("<II", data, offset)
        assert tag == OutTag.TEST_RESULTS
        assert TestResults.decode(data[offset + 8 : offset + 8 + length]) == TestResults(index=0)

    def test_unsupported_tag_exits_one(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("ok", passing_test)])
        result = runner.invoke(cli, ["--listen=-"], obj={"REGISTRY": registry}, input=frame(0x77))

        assert result.exit_code == 1

    def test_out_of_range_run_test_is_fatal(self, runner: CliRunner) -> None:
        registry = TestRegistry([TestCase("ok", passing_test)])
        requests = frame(InTag.RUN_TEST, struct.pack("<I", 5))

        result = runner.invoke(cli, ["--listen=-"], obj={"REGISTRY": registry}, input=requests)

        assert result.exit_code == FATAL_EXIT_CODE


class TestMainFunction:
    def test_main_exits_process_with_session_code(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            testrun.main([TestCase("ok", passing_test)], argv=[])
        assert exc_info.value.code == 0

    def test_main_accepts_plain_functions(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            testrun.main([failing_test], argv=[])
        assert exc_info.value.code == 1
