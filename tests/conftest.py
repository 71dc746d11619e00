"""Shared fixtures for the composition-kit test suite."""

from __future__ import annotations

from typing import Any

import pytest

from composition_kit.assembly.assembler import CompositionAssembler
from composition_kit.core.config import Settings
from composition_kit.registration.store import RegistrationStore


# ---------------------------------------------------------------------------
# Recipient doubles
# ---------------------------------------------------------------------------

class Recorder:
    """Appends ``(name, value)`` to a shared call log when notified."""

    def __init__(self, name: str, log: list[tuple[str, Any]] | None = None) -> None:
        self.name = name
        self.log = log if log is not None else []
        self.received: list[Any] = []

    async def notify(self, value: Any) -> None:
        self.received.append(value)
        self.log.append((self.name, value))


class Failing:
    """Raises on every notification."""

    def __init__(self, name: str, exc: Exception | None = None) -> None:
        self.name = name
        self.exc = exc or RuntimeError(f"{name} failed")
        self.calls = 0

    async def notify(self, value: Any) -> None:
        self.calls += 1
        raise self.exc


@pytest.fixture
def call_log() -> list[tuple[str, Any]]:
    return []


@pytest.fixture
def make_recorder(call_log):
    def _make(name: str) -> Recorder:
        return Recorder(name, call_log)

    return _make


@pytest.fixture
def store() -> RegistrationStore:
    return RegistrationStore()


@pytest.fixture
def assembler() -> CompositionAssembler:
    return CompositionAssembler()


@pytest.fixture
def settings() -> Settings:
    return Settings()
