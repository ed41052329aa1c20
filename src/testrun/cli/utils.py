# src/testrun/cli/utils.py

import sys

import click
import structlog

from testrun.config import HarnessConfig
from testrun.telemetry import setup_logging as core_setup_logging

log = structlog.get_logger("testrun.cli.utils")

# Process exit status for conditions that abort the whole session.
FATAL_EXIT_CODE = 3


def setup_logging_from_config(config: HarnessConfig) -> None:
    """
    Setup harness logging from the loaded configuration.
    """
    core_setup_logging(
        level=config.numeric_log_level,
        json_logs=config.json_logs,
        stream=sys.stderr,
    )
    log.debug(
        "CLI logging initialized via utils",
        level=config.log_level,
        display_level=config.display_level,
        json=config.json_logs,
    )


def abort(ctx: click.Context, message: str, exit_code: int = FATAL_EXIT_CODE) -> None:
    """Reports a fatal condition on stderr and terminates the process."""
    click.echo(f"fatal: {message}", err=True)
    ctx.exit(exit_code)

# ⚙️🛠️
