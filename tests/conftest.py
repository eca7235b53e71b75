"""Pytest configuration and fixtures for workload-sim tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

import pytest

import workload_sim.logging as sim_logging
from workload_sim.config import get_settings
from workload_sim.profiles import Profile


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop WORKLOAD_SIM_* variables and the cached settings around each test."""
    for key in list(os.environ):
        if key.startswith("WORKLOAD_SIM_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None]:
    """Detach handlers bound to streams that a test runner may have closed."""
    yield
    logging.getLogger().handlers.clear()
    sim_logging._configured = False  # noqa: SLF001


class RecordingSleep:
    """Suspender that records requested waits instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class AsyncRecordingSleep(RecordingSleep):
    async def __call__(self, seconds: float) -> None:  # type: ignore[override]  # noqa: RUF029
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def async_recording_sleep() -> AsyncRecordingSleep:
    return AsyncRecordingSleep()


@pytest.fixture
def fixed_io_profile() -> Profile:
    """Degenerate profile that always waits 50ms and does nothing else."""
    return Profile("FIXED_IO", 50, 50)


@pytest.fixture
def fixed_cpu_profile() -> Profile:
    """Profile with no I/O and a fixed 10ms CPU burn."""
    return Profile("FIXED_CPU", 0, 0, 10, 10)
