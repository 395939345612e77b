"""Shared fixtures."""

from __future__ import annotations

import pytest

from toolexec import Context, ToolRegistry, clear_settings_cache, reset_registry


@pytest.fixture(autouse=True)
def clean_globals() -> object:
    """Reset the default registry and cached settings around each test."""
    reset_registry()
    clear_settings_cache()
    yield
    reset_registry()
    clear_settings_cache()


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def ctx() -> object:
    root = Context.background()
    yield root
    root.cancel()
