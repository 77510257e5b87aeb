"""
data_models.py: Data structures for the game state and leaderboard.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .constants import BIRD_X, START_Y


class Phase(Enum):
    START = "start"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "gameOver"


@dataclass
class Bird:
    """The player-controlled mover. (x, y) is the top-left of its sprite."""
    x: float = BIRD_X
    y: float = START_Y
    velocity: float = 0.0
    rotation: float = 0.0           # Display only

    def reset(self):
        self.x = BIRD_X
        self.y = START_Y
        self.velocity = 0.0
        self.rotation = 0.0


@dataclass
class Pipe:
    """A top/bottom pipe pair with an open gap between gap_top and gap_bottom."""
    x: float
    gap_top: float
    gap_bottom: float
    scored: bool = False


@dataclass
class GameState:
    """
    The whole simulation state of one session.
    Owned and mutated by the GameEngine; renderers only read it.
    """
    phase: Phase = Phase.START
    frame: int = 0
    score: int = 0
    pipes: List[Pipe] = field(default_factory=list)   # Spawn order
    bird: Bird = field(default_factory=Bird)

    def reset(self):
        self.bird.reset()
        self.pipes = []
        self.frame = 0
        self.score = 0


@dataclass
class LeaderboardEntry:
    name: str
    score: int
    date: str = ""
    timestamp: int = 0              # Epoch milliseconds

    @classmethod
    def create(cls, name: str, score: int, now: Optional[float] = None) -> "LeaderboardEntry":
        """Builds a new entry stamped with the given (or current) wall time."""
        now = time.time() if now is None else now
        return cls(
            name=name,
            score=score,
            date=datetime.fromtimestamp(now).strftime("%Y-%m-%d"),
            timestamp=int(now * 1000),
        )

    def to_dict(self):
        """Prepares the persisted JSON layout."""
        return {
            "name": self.name,
            "score": self.score,
            "date": self.date,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaderboardEntry":
        score = int(data["score"])
        if score < 0:
            raise ValueError(f"negative score {score}")
        return cls(
            name=str(data["name"]),
            score=score,
            date=str(data.get("date", "")),
            timestamp=int(data.get("timestamp", 0)),
        )
