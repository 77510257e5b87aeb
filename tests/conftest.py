import random

import pytest

from birdbird.clock import ManualScheduler
from birdbird.engine import GameEngine
from birdbird.events import GameListener
from birdbird.scores import Leaderboard, ScoreKeeper
from birdbird.settings import GameConfig
from birdbird.storage import KeyValueStore, MemoryStore, StorageError


class BrokenStore(KeyValueStore):
    """Every operation fails, like a full or unavailable disk."""

    def get(self, key):
        raise StorageError("unavailable")

    def set(self, key, value):
        raise StorageError("quota exceeded")

    def delete(self, key):
        raise StorageError("unavailable")


class RecordingListener(GameListener):
    def __init__(self):
        self.calls = []

    def on_game_start(self):
        self.calls.append(("start",))

    def on_flap(self):
        self.calls.append(("flap",))

    def on_score(self, score):
        self.calls.append(("score", score))

    def on_game_over(self, score, best_score):
        self.calls.append(("game_over", score, best_score))

    def names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def broken_store():
    return BrokenStore()


@pytest.fixture
def config(store):
    cfg = GameConfig(store)
    cfg.load()
    return cfg


@pytest.fixture
def scores(store):
    return ScoreKeeper(store)


@pytest.fixture
def leaderboard(store):
    return Leaderboard(store)


@pytest.fixture
def scheduler():
    return ManualScheduler(start_ms=1000.0)


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def engine(config, scores, scheduler, listener):
    eng = GameEngine(config, scores, scheduler, rng=random.Random(1234))
    eng.add_listener(listener)
    return eng
