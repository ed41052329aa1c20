#
# src/testrun/tracking/__init__.py
#
"""
Per-test resource isolation: leak-checked allocation and log interception.
"""
from .allocator import AllocationRecord, TrackingAllocator
from .interceptor import LogInterceptor
from .tracker import ResourceTracker, ScopeReport, allocator

__all__ = [
    "AllocationRecord",
    "LogInterceptor",
    "ResourceTracker",
    "ScopeReport",
    "TrackingAllocator",
    "allocator",
]

# 🔼⚙️
