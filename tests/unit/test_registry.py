#
# tests/unit/test_registry.py
#
"""
Tests for the immutable test registry and its loaders.
"""

import sys
import types

import pytest

from testrun.exceptions import ConfigurationError, HarnessFatalError, TestIndexError
from testrun.registry import TestCase, TestRegistry, as_registry, load_registry


def sample_one() -> None:
    pass


def sample_two() -> None:
    pass


class TestRegistryAccess:
    def test_length_and_order(self) -> None:
        registry = TestRegistry([TestCase("a", sample_one), TestCase("bb", sample_two)])

        assert len(registry) == 2
        assert registry.get(0).name == "a"
        assert registry[1].name == "bb"
        assert registry.names == ["a", "bb"]
        assert [i for i, _ in registry.items()] == [0, 1]

    @pytest.mark.parametrize("index", [2, 10, -1])
    def test_out_of_range_is_fatal(self, index: int) -> None:
        registry = TestRegistry([TestCase("a", sample_one), TestCase("b", sample_two)])

        with pytest.raises(TestIndexError) as exc_info:
            registry.get(index)

        assert isinstance(exc_info.value, HarnessFatalError)
        assert exc_info.value.index == index
        assert exc_info.value.length == 2

    @pytest.mark.parametrize("cls", [TestCase, TestRegistry, TestIndexError])
    def test_harness_types_are_not_collected_by_pytest(self, cls: type) -> None:
        assert cls.__test__ is False

    def test_registry_is_frozen(self) -> None:
        registry = TestRegistry([TestCase("a", sample_one)])
        with pytest.raises(AttributeError):
            registry._cases = ()

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TestCase("", sample_one)

    def test_from_functions_uses_qualified_names(self) -> None:
        registry = TestRegistry.from_functions(sample_one, sample_two)

        assert registry.names == [f"{__name__}.sample_one", f"{__name__}.sample_two"]


class TestRegistryLoading:
    @pytest.fixture
    def registry_module(self, monkeypatch: pytest.MonkeyPatch) -> str:
        module = types.ModuleType("fake_registry_mod")
        module.REGISTRY = TestRegistry([TestCase("x", sample_one)])
        module.FUNCS = [sample_one, TestCase("named", sample_two)]
        module.NOT_A_REGISTRY = 42
        monkeypatch.setitem(sys.modules, "fake_registry_mod", module)
        return "fake_registry_mod"

    def test_load_prebuilt_registry(self, registry_module: str) -> None:
        registry = load_registry(f"{registry_module}:REGISTRY")
        assert registry.names == ["x"]

    def test_load_sequence_of_cases_and_functions(self, registry_module: str) -> None:
        registry = load_registry(f"{registry_module}:FUNCS")
        assert registry.names == [f"{__name__}.sample_one", "named"]

    @pytest.mark.parametrize(
        "location",
        ["no_colon", "fake_registry_mod:MISSING", "fake_registry_mod:NOT_A_REGISTRY", "does_not_exist_mod:X"],
    )
    def test_bad_locations(self, registry_module: str, location: str) -> None:
        with pytest.raises(ConfigurationError):
            load_registry(location)

    def test_as_registry_passes_registries_through(self) -> None:
        registry = TestRegistry([TestCase("a", sample_one)])
        assert as_registry(registry) is registry
