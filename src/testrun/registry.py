#
# src/testrun/registry.py
#
"""
The immutable, ordered collection of test cases a session runs.
"""

import importlib
from collections.abc import Callable, Iterable, Iterator, Sequence

import structlog
from attrs import define, field

from testrun.exceptions import ConfigurationError, TestIndexError

log = structlog.get_logger("testrun.registry")

TestFunction = Callable[[], None]


def _validate_name(inst, attr, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Test name must be a non-empty string, got {value!r}")


@define(frozen=True, slots=True)
class TestCase:
    """
    A named unit of test code.

    `run` returns normally on success, raises SkipTest to opt out and raises
    any other exception to fail.
    """
    __test__ = False

    name: str = field(validator=_validate_name)
    run: TestFunction = field()

    @classmethod
    def from_function(cls, func: TestFunction) -> "TestCase":
        return cls(name=f"{func.__module__}.{func.__qualname__}", run=func)


@define(frozen=True, slots=True)
class TestRegistry:
    """
    Ordered, read-only list of test cases, indexable by position.
    """
    __test__ = False

    _cases: tuple[TestCase, ...] = field(converter=tuple)

    @classmethod
    def from_functions(cls, *funcs: TestFunction) -> "TestRegistry":
        return cls(cases=[TestCase.from_function(f) for f in funcs])

    def __len__(self) -> int:
        return len(self._cases)

    def __getitem__(self, index: int) -> TestCase:
        return self.get(index)

    def __iter__(self) -> Iterator[TestCase]:
        return iter(self._cases)

    def get(self, index: int) -> TestCase:
        """Returns the case at `index`; out-of-range access is fatal."""
        if not 0 <= index < len(self._cases):
            raise TestIndexError(index, len(self._cases))
        return self._cases[index]

    def items(self) -> Iterator[tuple[int, TestCase]]:
        return enumerate(self._cases)

    @property
    def names(self) -> list[str]:
        return [case.name for case in self._cases]


def _coerce(obj: object) -> TestRegistry:
    if isinstance(obj, TestRegistry):
        return obj
    if isinstance(obj, Iterable) and not isinstance(obj, (str, bytes)):
        cases = []
        for item in obj:
            if isinstance(item, TestCase):
                cases.append(item)
            elif callable(item):
                cases.append(TestCase.from_function(item))
            else:
                raise ConfigurationError(f"Registry entry {item!r} is neither a TestCase nor callable")
        return TestRegistry(cases=cases)
    raise ConfigurationError(f"Object of type {type(obj).__name__} cannot be used as a test registry")


def load_registry(location: str) -> TestRegistry:
    """
    Imports a prebuilt registry given as "package.module:attribute".

    The attribute may be a TestRegistry, or a sequence of TestCase objects
    and/or plain test functions.
    """
    module_name, sep, attr_name = location.partition(":")
    if not sep or not module_name or not attr_name:
        raise ConfigurationError(f"Registry location must look like 'module:attribute', got '{location}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Unable to import registry module '{module_name}'", details=e) from e

    try:
        obj = getattr(module, attr_name)
    except AttributeError as e:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{attr_name}'", details=e) from e

    registry = _coerce(obj)
    log.debug("Loaded test registry", location=location, test_count=len(registry))
    return registry


def as_registry(tests: TestRegistry | Sequence[TestCase | TestFunction]) -> TestRegistry:
    """Accepts a registry or any sequence of cases/functions."""
    return _coerce(tests)

# 🔼⚙️
