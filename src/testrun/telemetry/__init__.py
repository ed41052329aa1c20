#
# src/testrun/telemetry/__init__.py
#
"""
Logging setup for the harness itself (not for the code under test).
"""
from .logger import BASE_LOGGER_NAME, StructLogger, setup_logging

__all__ = ["BASE_LOGGER_NAME", "StructLogger", "setup_logging"]

# 🔼⚙️
