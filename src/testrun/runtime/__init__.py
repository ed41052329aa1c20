#
# src/testrun/runtime/__init__.py
#
"""
Execution engine and the drivers that feed it: the sequential driver for
terminal and degraded modes, and the coordinator protocol server.
"""
from .driver import DriverCapabilities, SequentialDriver
from .engine import ExecutionEngine
from .reporter import TerminalRenderer
from .server import ProtocolServer

__all__ = [
    "DriverCapabilities",
    "ExecutionEngine",
    "ProtocolServer",
    "SequentialDriver",
    "TerminalRenderer",
]

# 🔼⚙️
