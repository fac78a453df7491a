"""Shared fixtures for simulation tests."""

from __future__ import annotations

import random

import pytest

from beamscan.config import SimulationConfig
from beamscan.corpora.policy_board import create_session
from beamscan.engine.signals import CueRecorder
from beamscan.model import Position, Session


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def config() -> SimulationConfig:
    """Default configuration, ignoring any .env file."""
    return SimulationConfig(_env_file=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> CueRecorder:
    return CueRecorder()


@pytest.fixture
def session(config: SimulationConfig, clock: FakeClock, recorder: CueRecorder) -> Session:
    """Seeded session with two laid-out targets: 0 under the craft, 1 far left."""
    sim = create_session(config, rng=random.Random(7), clock=clock, sinks=[recorder])
    sim.layout = {0: Position(640.0, 300.0), 1: Position(100.0, 300.0)}
    return sim
