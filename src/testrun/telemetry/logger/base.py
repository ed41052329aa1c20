# src/testrun/telemetry/logger/base.py

import logging
import sys
from typing import TextIO

import structlog
from structlog.typing import FilteringBoundLogger

from testrun.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

BASE_LOGGER_NAME = "testrun"


class HarnessRecordFilter(logging.Filter):
    """Lets through only records from the harness's own loggers."""

    def __init__(self):
        super().__init__(BASE_LOGGER_NAME)


def setup_logging(
    level: int = logging.WARNING,
    json_logs: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configures structlog for the harness.

    Output always goes to stderr (or `stream`): in server mode stdout
    carries protocol frames only.
    """
    log_level_name = logging.getLevelName(level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        remove_extra_keys_processor,
    ]
    if not json_logs:
        shared_processors.append(add_emoji_processor)
    shared_processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

    structlog.configure(
        processors=shared_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if json_logs:
        final_renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        final_renderer = structlog.dev.ConsoleRenderer(colors=True)

    formatter = structlog.stdlib.ProcessorFormatter(processor=final_renderer)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    console_handler.addFilter(HarnessRecordFilter())
    root_logger.addHandler(console_handler)

    slog = structlog.get_logger(BASE_LOGGER_NAME)
    slog.debug(
        "structlog logging initialization complete",
        log_level=log_level_name,
        json_console_format=json_logs,
    )


StructLogger = FilteringBoundLogger

# 🔼⚙️
