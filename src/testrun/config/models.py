#
# config/models.py
#
"""
Attrs-based data models for testrun configuration.
"""

import logging
from enum import Enum
from typing import Any

from attrs import define, field


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid {attr.name} '{value}'. Must be one of {list(valid)}.")


def _validate_registry_location(inst: Any, attr: Any, value: str | None) -> None:
    if value is None:
        return
    module_name, sep, attr_name = value.partition(":")
    if not (module_name and sep and attr_name):
        raise ValueError(f"Invalid registry location '{value}'. Expected 'module:attribute'.")


class ExecutorKind(Enum):
    """Which sequential driver runs in terminal mode."""

    FULL = "full"
    FAIL_FAST = "fail-fast"
    TALLY = "tally"


@define(frozen=True, slots=True)
class HarnessConfig:
    """Settings for one harness session."""

    log_level: str = field(default="WARNING", validator=_validate_log_level)
    display_level: str = field(default="WARNING", validator=_validate_log_level)
    json_logs: bool = field(default=False)
    executor: ExecutorKind = field(default=ExecutorKind.FULL, converter=ExecutorKind)
    tally_summary: bool = field(default=True)
    registry: str | None = field(default=None, validator=_validate_registry_location)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @property
    def numeric_display_level(self) -> int:
        return logging.getLevelName(self.display_level.upper())

# 🔼⚙️
