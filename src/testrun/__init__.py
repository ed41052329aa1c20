#
# src/testrun/__init__.py
#
"""
testrun: runs a fixed registry of tests with per-test leak and log-error
isolation, reporting to a terminal or to a build coordinator.
"""
from testrun.cli.main import main
from testrun.exceptions import SkipTest
from testrun.registry import TestCase, TestRegistry
from testrun.tracking import allocator

__all__ = [
    "SkipTest",
    "TestCase",
    "TestRegistry",
    "allocator",
    "main",
]

# 🔼⚙️
