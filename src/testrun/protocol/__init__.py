#
# src/testrun/protocol/__init__.py
#
"""
Framed binary protocol spoken with an external build coordinator.
"""
from .messages import (
    InTag,
    MessageHeader,
    OutTag,
    StringTable,
    TestMetadata,
    TestResults,
)
from .stream import MessageStream

__all__ = [
    "InTag",
    "MessageHeader",
    "MessageStream",
    "OutTag",
    "StringTable",
    "TestMetadata",
    "TestResults",
]

# 🔼⚙️
