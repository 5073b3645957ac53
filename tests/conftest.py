from datetime import datetime, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from tickdown.clock import TickSource
from tickdown.collection import TimerCollection


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeClock:
    def __init__(self, start=datetime(2026, 1, 5, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


class FakeAudio:
    def __init__(self):
        self.played = []

    def available_sounds(self):
        return ["Alarm 01", "Ding"]

    def play(self, sound_name):
        self.played.append(sound_name)


class MemoryStore:
    def __init__(self, timers=None, fail=False):
        self.timers = list(timers or [])
        self.fail = fail
        self.saves = []
        self.window = None

    def load_timers(self):
        return list(self.timers)

    def save_timers(self, timers):
        if self.fail:
            return False
        snapshot = [t.to_dict() for t in timers]
        self.saves.append(snapshot)
        return True

    def load_window_settings(self):
        return self.window

    def save_window_settings(self, settings):
        self.window = settings
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ticks():
    source = TickSource()
    yield source
    source.stop()


@pytest.fixture
def collection(ticks, store, audio, clock):
    coll = TimerCollection(ticks, store, audio, clock=clock)
    yield coll
    coll.close()
