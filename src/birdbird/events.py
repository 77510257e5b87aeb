"""
events.py: Notification port between the engine and audio/UI/render code.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


class GameListener:
    """Override the hooks you care about. Calls must return promptly."""

    def on_game_start(self):
        pass

    def on_flap(self):
        pass

    def on_score(self, score: int):
        pass

    def on_game_over(self, score: int, best_score: int):
        pass


class NotificationPort:
    """
    Ordered list of listeners, called in registration order.

    A listener that raises is logged and skipped; the others still run.
    """

    def __init__(self):
        self._listeners: List[GameListener] = []

    def add_listener(self, listener: GameListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _dispatch(self, hook: str, *args):
        for listener in list(self._listeners):
            try:
                getattr(listener, hook)(*args)
            except Exception as e:
                logger.error(f"Error in {hook} listener {listener!r}: {e}")

    def game_start(self):
        self._dispatch("on_game_start")

    def flap(self):
        self._dispatch("on_flap")

    def score(self, score: int):
        self._dispatch("on_score", score)

    def game_over(self, score: int, best_score: int):
        self._dispatch("on_game_over", score, best_score)
