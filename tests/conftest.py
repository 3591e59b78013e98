"""Core test fixtures for dice engine tests."""

import pytest

from dicelang.config import Settings
from tests.factories import MaxRandom, ScriptedRandom, create_settings


@pytest.fixture
def scripted():
    """Factory for a ScriptedRandom loaded with the given draws.

    Usage:
        rng = scripted(3, 4)
    """

    def _make(*values: int) -> ScriptedRandom:
        return ScriptedRandom(values)

    return _make


@pytest.fixture
def max_random() -> MaxRandom:
    """Random source that always rolls max faces."""
    return MaxRandom()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return create_settings()
