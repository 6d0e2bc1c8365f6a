"""Shared pytest fixtures for switchyard tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

import pytest
from click.testing import CliRunner

from switchyard.core.cancellation import CancellationToken
from switchyard.core.mediator import Mediator
from switchyard.core.registry import HandlerRegistry
from switchyard.infrastructure.memory_cache import MemoryCacheStore


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer SWITCHYARD_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("SWITCHYARD_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo root-logger changes made by configure_logging (CLI runs call it)."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    ours = logging.getLogger("switchyard")
    our_level = ours.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    ours.setLevel(our_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def mediator(registry: HandlerRegistry) -> Mediator:
    """Mediator reading from the ``registry`` fixture."""
    return Mediator(registry)


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_store(clock: FakeClock) -> MemoryCacheStore:
    """In-memory cache store driven by the fake clock."""
    return MemoryCacheStore(clock=clock)
