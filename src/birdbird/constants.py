"""
constants.py: Structural game constants, difficulty presets and storage keys.
"""

from dataclasses import dataclass

# -------- Field Config --------
FIELD_WIDTH = 320
FIELD_HEIGHT = 480
GROUND_HEIGHT = 50

# -------- Bird Config --------
BIRD_X = 80                     # Fixed bird X position
START_Y = 240
BIRD_WIDTH = 34
BIRD_HEIGHT = 24
JUMP_IMPULSE = -6.0             # Instantaneous velocity set by a flap
MAX_VELOCITY = 15.0             # Downward clamp
ROTATION_FACTOR = 0.05
MAX_ROTATION = 0.5              # Radians, display only

# Hitbox is smaller than the sprite on each side
HITBOX_INSET_X = 6
HITBOX_INSET_Y = 4

# -------- Pipe Config --------
PIPE_WIDTH = 52
MIN_GAP_TOP = 50
GAP_BOTTOM_MARGIN = 100         # Space kept between the lowest gap and the field bottom

# Scroll speed grows by SPEED_STEP every SPEED_STEP_SCORE points
SPEED_STEP_SCORE = 10
SPEED_STEP = 0.1
MAX_SPEED_SCALE = 1.5

# -------- Timing Config --------
TARGET_FPS = 60
FRAME_TIME_MS = 1000.0 / TARGET_FPS
MAX_DELTA_MS = 32.0             # Longer frames are clamped before reaching physics
FPS_WINDOW_MS = 1000.0

# -------- User Settings Defaults --------
DEFAULT_SPEED_MULTIPLIER = 1.0
MIN_SPEED_MULTIPLIER = 0.5
MAX_SPEED_MULTIPLIER = 2.0

# -------- Leaderboard Config --------
LEADERBOARD_SIZE = 10
MAX_NAME_LENGTH = 16
DEFAULT_PLAYER_NAME = "Anonymous"

# -------- Storage Keys --------
HIGH_SCORE_KEY = "birdbird-high-score-v26"
SETTINGS_KEY = "birdbird-settings-v26"
LEADERBOARD_KEY = "birdbird-leaderboard-v26"
DB_FILE = "birdbird.db"


@dataclass(frozen=True)
class DifficultyPreset:
    """Structural values that depend on the selected difficulty."""
    gravity: float
    pipe_gap: float
    speed: float
    spawn_interval: int


DIFFICULTY_PRESETS = {
    "easy": DifficultyPreset(gravity=0.35, pipe_gap=140, speed=1.5, spawn_interval=100),
    "normal": DifficultyPreset(gravity=0.4, pipe_gap=120, speed=2.0, spawn_interval=90),
    "hard": DifficultyPreset(gravity=0.45, pipe_gap=100, speed=2.5, spawn_interval=80),
}
