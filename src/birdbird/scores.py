"""
scores.py: Best-score tracking and the local top-10 leaderboard.

Both classes write through to the key-value store on every change. Store
failures are logged and the in-memory value stays authoritative.
"""

import html
import json
import logging
import re
from typing import List, Optional

from .constants import (
    DEFAULT_PLAYER_NAME, HIGH_SCORE_KEY, LEADERBOARD_KEY, LEADERBOARD_SIZE,
    MAX_NAME_LENGTH
)
from .data_models import LeaderboardEntry
from .storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_name(name: Optional[str]) -> str:
    """Strips markup and control characters, trims and caps the length."""
    if not name:
        return DEFAULT_PLAYER_NAME
    cleaned = html.unescape(_TAG_RE.sub("", name))
    cleaned = _TAG_RE.sub("", cleaned)
    cleaned = _CONTROL_RE.sub("", cleaned).strip()
    cleaned = cleaned[:MAX_NAME_LENGTH].strip()
    return cleaned or DEFAULT_PLAYER_NAME


class ScoreKeeper:
    """The persisted best score. Only goes up, except through reset()."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.best_score = self.load()

    def load(self) -> int:
        try:
            raw = self.store.get(HIGH_SCORE_KEY)
            best = int(raw) if raw is not None else 0
        except (StorageError, ValueError) as e:
            logger.warning(f"Failed to load best score: {e}")
            return 0
        return max(best, 0)

    def _save(self):
        try:
            self.store.set(HIGH_SCORE_KEY, str(self.best_score))
        except StorageError as e:
            logger.warning(f"Failed to save best score: {e}")

    def record_score(self, score: int) -> bool:
        """Returns True when score is a new best (and persists it)."""
        if score <= self.best_score:
            return False
        self.best_score = score
        self._save()
        return True

    def reset(self):
        self.best_score = 0
        self._save()
        logger.info("Best score reset")


class Leaderboard:
    """Top scores sorted descending, at most LEADERBOARD_SIZE entries."""

    def __init__(self, store: KeyValueStore, size: int = LEADERBOARD_SIZE):
        self.store = store
        self.size = size
        self.entries: List[LeaderboardEntry] = self.load()

    def load(self) -> List[LeaderboardEntry]:
        try:
            raw = self.store.get(LEADERBOARD_KEY)
            data = json.loads(raw) if raw is not None else []
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
        except (StorageError, ValueError) as e:
            logger.warning(f"Failed to load leaderboard: {e}")
            return []

        entries = []
        for item in data:
            try:
                entries.append(LeaderboardEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping corrupt leaderboard entry {item!r}: {e}")
        return self._ranked(entries)

    def _save(self):
        try:
            self.store.set(LEADERBOARD_KEY, json.dumps([e.to_dict() for e in self.entries]))
        except StorageError as e:
            logger.warning(f"Failed to save leaderboard: {e}")

    def _ranked(self, entries: List[LeaderboardEntry]) -> List[LeaderboardEntry]:
        # sorted() is stable, so equal scores keep their submission order
        return sorted(entries, key=lambda e: e.score, reverse=True)[:self.size]

    def submit(self, name: Optional[str], score: int, now: Optional[float] = None) -> LeaderboardEntry:
        """Adds an entry, re-sorts, truncates and persists. Returns the new entry."""
        if score < 0:
            raise ValueError(f"score must be >= 0, got {score}")

        entry = LeaderboardEntry.create(sanitize_name(name), score, now)
        self.entries = self._ranked(self.entries + [entry])
        self._save()
        return entry

    def is_top_score(self, score: int) -> bool:
        return len(self.entries) < self.size or score > self.entries[-1].score

    def rank_of(self, score: int) -> int:
        return 1 + sum(1 for e in self.entries if e.score > score)

    def top_score(self) -> int:
        return self.entries[0].score if self.entries else 0

    def stats(self) -> dict:
        if not self.entries:
            return {"total_games": 0, "average_score": 0, "best_score": 0}
        total = sum(e.score for e in self.entries)
        return {
            "total_games": len(self.entries),
            "average_score": round(total / len(self.entries)),
            "best_score": self.entries[0].score,
        }

    def clear(self):
        self.entries = []
        self._save()
