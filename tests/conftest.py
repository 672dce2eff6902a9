"""Shared fixtures: a hand-cranked clock and a scheduler that never fires on
its own, so timer behaviour is deterministic."""

from __future__ import annotations

import typing as tp

import pytest

from time_motion_study.recorder import Recorder


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeHandle:
    def __init__(self, interval: float, callback: tp.Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeScheduler:
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def __call__(self, interval: float, callback: tp.Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(interval, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.stopped]

    def fireAll(self) -> None:
        for h in self.live:
            h.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def recorder(clock: FakeClock, scheduler: FakeScheduler) -> Recorder:
    return Recorder(schedule=scheduler, tick_interval=0.01, clock=clock)
