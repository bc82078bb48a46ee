"""
================================================================================
Unit Test Fixtures
================================================================================

Browser-free fixtures: a fake clock driving the poll engine and a session
handle backed by an in-memory page (see fakes.py).

================================================================================
"""

import pytest

from steadyui.framework import poll_engine
from steadyui.framework.session import SessionConfig, SessionHandle

from .fakes import FakeBackend, FakeClock


@pytest.fixture
def fake_clock(monkeypatch) -> FakeClock:
    """Drive the poll engine with a fake clock."""
    clock = FakeClock()
    monkeypatch.setattr(poll_engine, "time", clock)
    return clock


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_session(backend: FakeBackend) -> SessionHandle:
    return SessionHandle(backend, SessionConfig())
