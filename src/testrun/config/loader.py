#
# config/loader.py
#
"""
Builds a HarnessConfig from environment variables.

The argument vector is reserved for the `--listen=-` switch, so every
other setting is read from the environment.
"""

import os
from collections.abc import Mapping

import structlog

from testrun.config.models import HarnessConfig
from testrun.exceptions import ConfigurationError

log = structlog.get_logger("testrun.config.loader")

ENV_PREFIX = "TESTRUN_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Environment variable {name} must be a boolean, got '{raw}'")


def load_config(environ: Mapping[str, str] | None = None) -> HarnessConfig:
    """
    Reads TESTRUN_* variables and validates them into a HarnessConfig.

    Raises:
        ConfigurationError: if any value fails validation.
    """
    env = os.environ if environ is None else environ
    kwargs: dict[str, object] = {}

    for key in ("log_level", "display_level", "executor", "registry"):
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None and raw.strip():
            kwargs[key] = raw.strip()

    for key in ("json_logs", "tally_summary"):
        name = ENV_PREFIX + key.upper()
        raw = env.get(name)
        if raw is not None:
            kwargs[key] = _parse_bool(name, raw)

    try:
        config = HarnessConfig(**kwargs)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}", details=e) from e

    log.debug(
        "Configuration loaded from environment",
        overrides=sorted(kwargs),
        executor=config.executor.value,
    )
    return config

# 🔼⚙️
