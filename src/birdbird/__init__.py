"""
BirdBird: a single-player flappy arcade game with a fixed-step simulation core.
"""

from .engine import GameEngine
from .settings import GameConfig
from .scores import Leaderboard, ScoreKeeper

__version__ = "2.6.0"

__all__ = ["GameEngine", "GameConfig", "Leaderboard", "ScoreKeeper"]
