"""Shared pytest fixtures for sourcemark tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from sourcemark.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Generator

_SETTINGS_PREFIXES = ("HIGHLIGHT__", "EDITOR__", "APP__")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run every test against default settings.

    Strips sourcemark variables from the environment and resets the cached
    ``get_settings()`` instance before and after the test.
    """
    for key in list(os.environ):
        if key.startswith(_SETTINGS_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
