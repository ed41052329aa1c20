#
# config/__init__.py
#
"""
Configuration handling sub-package for testrun.

Exports the loading function and core configuration model.
"""

from .loader import load_config
from .models import ExecutorKind, HarnessConfig

__all__ = [
    "ExecutorKind",
    "HarnessConfig",
    "load_config",
]

# 🔼⚙️
