"""Shared fixtures."""

import pytest

from typegorm import MetadataRegistry, clear_cache


@pytest.fixture
def registry():
    """A fresh, empty registry."""
    return MetadataRegistry()


@pytest.fixture(autouse=True)
def _empty_default_registry():
    clear_cache()
    yield
    clear_cache()
