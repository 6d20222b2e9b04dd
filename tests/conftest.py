"""Shared pytest fixtures and fakes for the gesture instrument test suite."""

from __future__ import annotations

import asyncio
from typing import List, Tuple

import pytest

from gesture_instrument.types import Landmark


# =============================================================================
# Fakes
# =============================================================================

class FakeToneSink:
    """Tone sink that records every command it receives."""

    def __init__(self, ready: bool = True) -> None:
        self.ready = ready
        self.calls: List[Tuple] = []
        self.volumes: List[float] = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    def attack(self, frequency_hz: float) -> None:
        self.calls.append(("attack", frequency_hz))

    def retarget(self, frequency_hz: float) -> None:
        self.calls.append(("retarget", frequency_hz))

    def release(self) -> None:
        self.calls.append(("release",))

    def set_volume(self, percent: float) -> None:
        self.volumes.append(percent)

    @property
    def kinds(self) -> List[str]:
        return [c[0] for c in self.calls]


class ManualClock:
    """Millisecond clock advanced explicitly by the test."""

    def __init__(self, start_ms: float = 1000.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms


class FakeSleep:
    """Records requested delays and yields to the loop without waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


def make_frame(x: float, y: float, z: float = -0.025, n: int = 21) -> List[Landmark]:
    """A hand whose index fingertip (landmark 8) sits at normalized (x, y), all at depth z."""
    frame = [Landmark(0.5, 0.5, z) for _ in range(n)]
    frame[8] = Landmark(x, y, z)
    return frame


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def sink() -> FakeToneSink:
    return FakeToneSink()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()
