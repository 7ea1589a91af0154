"""Tests for prowl.__init__ — lazy import registry covers all public names."""

import pytest

import prowl


@pytest.mark.parametrize("name", prowl.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(prowl, name)
    assert obj is not None, f"prowl.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        prowl.__getattr__("ThisDoesNotExist")
