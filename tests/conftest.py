"""
Shared fixtures.
"""

import pytest

from knockknock import KnockKnock, SimpleRequest, SimpleResponse
from knockknock.config import get_settings
from knockknock.core.registry import reset_registry


class Next:
    """Records how a middleware finished."""

    def __init__(self):
        self.calls: list[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def error(self):
        return self.calls[-1][0] if self.calls and self.calls[-1] else None


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    """Isolate settings and the default registry between tests."""
    monkeypatch.delenv("KNOCK_THROW_UNAUTHORIZED_ERROR", raising=False)
    get_settings.cache_clear()
    reset_registry()
    yield
    get_settings.cache_clear()
    reset_registry()


@pytest.fixture
def knock():
    """Empty dispatcher with default options."""
    return KnockKnock()


@pytest.fixture
def req():
    return SimpleRequest()


@pytest.fixture
def res():
    return SimpleResponse()


@pytest.fixture
def next_():
    return Next()
