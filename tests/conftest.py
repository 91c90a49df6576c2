"""Shared test fixtures for the posturemax test suite.

Provides common fixtures used across unit tests: a controllable clock,
samples, a headless window backend, the bus, the registry and a wired
orchestrator with a mock sample producer.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from posturemax.bus.channel import CommandBus
from posturemax.domain.models import Bounds, StatusSample
from posturemax.producer.base import SampleProducer
from posturemax.session.orchestrator import SessionOrchestrator
from posturemax.surfaces.registry import SurfaceRegistry
from posturemax.windowing.headless import HeadlessWindowBackend

GRACE = 0.05


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_sample(is_good: bool, at: float = 0.0) -> StatusSample:
    return StatusSample(
        timestamp=datetime(2025, 1, 1, 12, 0, 0) + timedelta(seconds=at),
        is_good=is_good,
    )


# ---------------------------------------------------------------------------
# Sample Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scenario_samples() -> list[StatusSample]:
    """Good at 0s, bad at 2s and 5s, good again at 9s."""
    return [
        make_sample(True, 0),
        make_sample(False, 2),
        make_sample(False, 5),
        make_sample(True, 9),
    ]


# ---------------------------------------------------------------------------
# Component Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def window_backend() -> HeadlessWindowBackend:
    return HeadlessWindowBackend(work_area=Bounds(width=1920, height=1080))


@pytest.fixture
def bus() -> CommandBus:
    return CommandBus()


@pytest.fixture
def registry(window_backend: HeadlessWindowBackend) -> SurfaceRegistry:
    return SurfaceRegistry(window_backend, hide_grace=GRACE)


@pytest.fixture
def mock_producer() -> MagicMock:
    """A mock SampleProducer; tests feed samples by hand."""
    mock = MagicMock(spec=SampleProducer)
    mock.is_producing = False
    return mock


@pytest.fixture
def orchestrator(
    bus: CommandBus,
    registry: SurfaceRegistry,
    mock_producer: MagicMock,
    clock: FakeClock,
) -> SessionOrchestrator:
    return SessionOrchestrator(bus, registry, mock_producer, clock=clock)


async def drain(channel) -> list:
    """Receive every message currently queued on a channel."""
    messages = []
    while channel.pending() > 0:
        messages.append(await channel.receive())
    return messages
