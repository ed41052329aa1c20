# src/testrun/tracking/interceptor.py

"""
Process-wide logging hook that counts and echoes log records emitted by tests.
"""

import logging
import sys
from typing import TextIO

from testrun.telemetry.logger import BASE_LOGGER_NAME


def is_harness_record(record: logging.LogRecord) -> bool:
    name = record.name
    return name == BASE_LOGGER_NAME or name.startswith(BASE_LOGGER_NAME + ".")


def _message(record: logging.LogRecord) -> str:
    # structlog wraps its event dict into record.msg when routed through stdlib.
    if isinstance(record.msg, dict) and "event" in record.msg:
        return str(record.msg["event"])
    return record.getMessage()


class LogInterceptor(logging.Handler):
    """
    Counts error-level records and prints records at or above `display_level`.

    The two checks are independent: a record can be counted without being
    shown and the other way round. Records from the harness's own loggers
    are ignored here; the telemetry handler takes care of them.
    """

    def __init__(self, display_level: int = logging.WARNING, stream: TextIO | None = None):
        super().__init__(level=logging.NOTSET)
        self.display_level = display_level
        self._stream = stream
        self.counting = False
        self.error_count = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def filter(self, record: logging.LogRecord) -> bool:
        if is_harness_record(record):
            return False
        return super().filter(record)

    def reset(self) -> int:
        """Returns the current count and sets it back to zero."""
        count = self.error_count
        self.error_count = 0
        return count

    def emit(self, record: logging.LogRecord) -> None:
        if self.counting and record.levelno >= logging.ERROR:
            self.error_count += 1
        if record.levelno >= self.display_level:
            try:
                line = f"[{record.name}] ({record.levelname.lower()}): {_message(record)}\n"
                self.stream.write(line)
                self.stream.flush()
            except Exception:
                self.handleError(record)

    def install(self, logger: logging.Logger | None = None) -> None:
        target = logger or logging.getLogger()
        if self not in target.handlers:
            target.addHandler(self)
        # Records below the logger's effective level never reach handlers.
        needed = min(self.display_level, logging.ERROR)
        if target.getEffectiveLevel() > needed:
            target.setLevel(needed)

    def uninstall(self, logger: logging.Logger | None = None) -> None:
        target = logger or logging.getLogger()
        target.removeHandler(self)

# 🔼⚙️
