"""
settings.py: User settings and the configuration context handed to the engine.

Settings are validated with pydantic and persisted as JSON in the key-value
store. A bad value in one field falls back to that field's default without
discarding the rest.
"""

import json
import logging
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from .constants import (
    DEFAULT_SPEED_MULTIPLIER, DIFFICULTY_PRESETS, MAX_SPEED_MULTIPLIER,
    MIN_SPEED_MULTIPLIER, SETTINGS_KEY, DifficultyPreset
)
from .storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class Settings(BaseModel):
    """User-adjustable settings. Aliases match the persisted JSON layout."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    speed_multiplier: float = Field(default=DEFAULT_SPEED_MULTIPLIER, alias="gameSpeed")
    sound_enabled: bool = Field(default=True, alias="soundEnabled")
    difficulty: Difficulty = Field(default=Difficulty.NORMAL, alias="difficulty")
    show_fps: bool = Field(default=False, alias="showFPS")

    @field_validator("*", mode="wrap")
    @classmethod
    def _fall_back_to_default(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        default = cls.model_fields[info.field_name].default
        try:
            value = handler(value)
        except ValidationError:
            logger.warning(f"Invalid {info.field_name} setting {value!r}, using {default!r}")
            return default

        if info.field_name == "speed_multiplier":
            if not value > 0:
                logger.warning(f"Non-positive speed {value!r}, using {default!r}")
                return default
            value = min(max(value, MIN_SPEED_MULTIPLIER), MAX_SPEED_MULTIPLIER)
        return value

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True))


class GameConfig:
    """
    Configuration context owned by the application root.

    Holds the user Settings and the structural values derived from the
    selected difficulty. Passed explicitly to the engine and score keeper.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.settings = Settings()
        self.preset: DifficultyPreset = DIFFICULTY_PRESETS[Difficulty.NORMAL.value]

    # -------- Derived values --------

    @property
    def gravity(self) -> float:
        return self.preset.gravity

    @property
    def pipe_gap(self) -> float:
        return self.preset.pipe_gap

    @property
    def base_speed(self) -> float:
        return self.preset.speed

    @property
    def speed_multiplier(self) -> float:
        return self.settings.speed_multiplier

    def spawn_interval(self) -> int:
        """Frames between pipe spawns at the current speed multiplier."""
        return max(1, int(self.preset.spawn_interval / self.settings.speed_multiplier))

    # -------- Persistence --------

    def load(self):
        """Reads persisted settings. Never raises; bad data falls back to defaults."""
        try:
            raw = self.store.get(SETTINGS_KEY)
            if raw is not None:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError(f"expected an object, got {type(data).__name__}")
                self.settings = Settings.model_validate(data)
        except (StorageError, ValueError) as e:
            logger.warning(f"Failed to load settings: {e}")
            self.settings = Settings()
        self.apply_difficulty()

    def save(self) -> bool:
        try:
            self.store.set(SETTINGS_KEY, self.settings.to_json())
        except StorageError as e:
            logger.warning(f"Failed to save settings: {e}")
            return False
        return True

    def reset(self):
        """Restores default settings, persists them and re-derives the preset."""
        self.settings = Settings()
        self.save()
        self.apply_difficulty()
        logger.info("Settings reset to defaults")

    def apply_difficulty(self) -> DifficultyPreset:
        self.preset = DIFFICULTY_PRESETS.get(
            self.settings.difficulty.value, DIFFICULTY_PRESETS[Difficulty.NORMAL.value])
        return self.preset

    # -------- Mutators (each one saves) --------

    def _update(self, **changes):
        data = self.settings.model_dump()
        data.update(changes)
        self.settings = Settings.model_validate(data)
        self.save()

    def set_speed_multiplier(self, value: float):
        self._update(speed_multiplier=value)

    def set_difficulty(self, value):
        self._update(difficulty=value)
        self.apply_difficulty()
        logger.info(f"Difficulty set to {self.settings.difficulty.value}")

    def set_sound_enabled(self, enabled: bool):
        self._update(sound_enabled=enabled)

    def set_show_fps(self, enabled: bool):
        self._update(show_fps=enabled)
