"""Tests for wren.__init__ — lazy exports cover all public names."""

import logging

import pytest

import wren


@pytest.mark.parametrize("name", wren.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(wren, name)
    assert obj is not None, f"wren.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        wren.__getattr__("ThisDoesNotExist")


def test_package_logger_has_null_handler() -> None:
    handlers = logging.getLogger("wren").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
