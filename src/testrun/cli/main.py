# src/testrun/cli/main.py

"""
Process entry point for a test binary.

No arguments runs the registry in terminal mode; exactly `--listen=-`
serves the coordinator protocol over stdin/stdout. Everything else is a
usage error raised before any test runs. All other settings come from
TESTRUN_* environment variables.
"""

import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from testrun.cli.utils import FATAL_EXIT_CODE, abort, setup_logging_from_config
from testrun.config import ExecutorKind, HarnessConfig, load_config
from testrun.exceptions import ConfigurationError, HarnessFatalError
from testrun.registry import TestCase, TestFunction, TestRegistry, as_registry, load_registry
from testrun.runtime import (
    DriverCapabilities,
    ExecutionEngine,
    ProtocolServer,
    SequentialDriver,
)
from testrun.telemetry import StructLogger
from testrun.tracking import LogInterceptor, ResourceTracker

try:
    __version__ = version("testrun")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("testrun.cli.main")

LISTEN_ARGUMENT = "--listen=-"


def _resolve_registry(ctx: click.Context, config: HarnessConfig) -> TestRegistry:
    registry = (ctx.obj or {}).get("REGISTRY")
    if registry is not None:
        return registry
    if config.registry is None:
        raise ConfigurationError("No test registry given; set TESTRUN_REGISTRY=module:attribute")
    return load_registry(config.registry)


def _run_terminal(engine: ExecutionEngine, config: HarnessConfig) -> int:
    caps = DriverCapabilities.for_executor(config.executor, tally_summary=config.tally_summary)
    driver = SequentialDriver(engine, capabilities=caps)
    if config.executor is not ExecutorKind.FAIL_FAST:
        return driver.run_all()
    try:
        return driver.run_all()
    except HarnessFatalError:
        raise
    except Exception as e:
        log.error("Test failure stopped the run", error_type=type(e).__name__, error=str(e))
        click.echo(f"test failure: {type(e).__name__}: {e}", err=True)
        return 1


class ListenOnlyCommand(click.Command):
    """Accepts no arguments or exactly `--listen=-`; click would also take `--listen -`."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and args != [LISTEN_ARGUMENT]:
            raise click.UsageError(
                f"unrecognized arguments: {' '.join(args)} (only {LISTEN_ARGUMENT} is accepted)", ctx=ctx
            )
        return super().parse_args(ctx, args)


@click.command(name="testrun", cls=ListenOnlyCommand, add_help_option=False)
@click.option(
    "--listen",
    type=click.Choice(["-"]),
    default=None,
    help="Serve the coordinator protocol on stdin/stdout ('-' is the only accepted value).",
)
@click.pass_context
def cli(ctx: click.Context, listen: str | None):
    """Run the registered tests, or serve them to a build coordinator."""
    ctx.ensure_object(dict)

    try:
        config = load_config()
    except ConfigurationError as e:
        abort(ctx, str(e))

    setup_logging_from_config(config)
    log.debug("Harness starting", mode="server" if listen else "terminal", version=__version__)

    interceptor = LogInterceptor(display_level=config.numeric_display_level)
    tracker = ResourceTracker(interceptor)
    interceptor.install()
    try:
        registry = _resolve_registry(ctx, config)
        engine = ExecutionEngine(registry, tracker)

        if listen:
            server = ProtocolServer(
                engine,
                inbound=sys.stdin.buffer,
                outbound=sys.stdout.buffer,
                version=__version__,
            )
            exit_code = server.serve()
        else:
            exit_code = _run_terminal(engine, config)
    except (ConfigurationError, HarnessFatalError) as e:
        log.critical("Fatal harness error", error_type=type(e).__name__, error=str(e))
        abort(ctx, str(e), FATAL_EXIT_CODE)
    finally:
        interceptor.uninstall()

    ctx.exit(exit_code)


def main(
    tests: TestRegistry | Sequence[TestCase | TestFunction],
    argv: Sequence[str] | None = None,
) -> None:
    """
    Runs a test program over `tests` and exits the process.

    Meant for `if __name__ == "__main__": testrun.main(REGISTRY)`.
    """
    registry = as_registry(tests)
    cli.main(args=list(argv) if argv is not None else None, prog_name="testrun", obj={"REGISTRY": registry})


def entrypoint() -> None:
    """Console script: the registry location comes from TESTRUN_REGISTRY."""
    cli.main(prog_name="testrun", obj={})


if __name__ == "__main__":
    entrypoint()

# 🖥️⚙️
