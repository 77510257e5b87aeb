"""
physics_core.py: Deterministic kinematic functions and collision logic.
"""

from typing import List

from .constants import (
    BIRD_HEIGHT, BIRD_WIDTH, FIELD_HEIGHT, GROUND_HEIGHT, HITBOX_INSET_X,
    HITBOX_INSET_Y, JUMP_IMPULSE, MAX_ROTATION, MAX_SPEED_SCALE, MAX_VELOCITY,
    PIPE_WIDTH, ROTATION_FACTOR, SPEED_STEP, SPEED_STEP_SCORE
)
from .data_models import Bird, Pipe
from .settings import GameConfig


class PhysicsCore:
    """
    Shared deterministic physics used by the engine.
    Difficulty-dependent values are read from the GameConfig on every call.
    """

    GROUND_Y = FIELD_HEIGHT - GROUND_HEIGHT

    def __init__(self, config: GameConfig):
        self.config = config

    def apply_gravity_and_movement(self, bird: Bird, dt: float):
        """Integrates one step of gravity for the bird (mutates it)."""
        multiplier = self.config.speed_multiplier

        bird.velocity += self.config.gravity * multiplier * dt
        bird.velocity = min(bird.velocity, MAX_VELOCITY)
        bird.y += bird.velocity * multiplier * dt

        bird.rotation = max(-MAX_ROTATION, min(MAX_ROTATION, bird.velocity * ROTATION_FACTOR))

    def jump_velocity(self) -> float:
        """Returns the instantaneous velocity after a flap."""
        return JUMP_IMPULSE

    def scroll_speed(self, score: int) -> float:
        """Base speed for the difficulty, stepped up as the score grows."""
        scale = 1 + SPEED_STEP * (score // SPEED_STEP_SCORE)
        return self.config.base_speed * min(scale, MAX_SPEED_SCALE)

    def advance_pipes(self, pipes: List[Pipe], distance: float) -> List[Pipe]:
        """Moves pipes left and returns the ones still (partly) on the field."""
        for pipe in pipes:
            pipe.x -= distance
        return [p for p in pipes if p.x + PIPE_WIDTH >= 0]

    def hits_bounds(self, bird: Bird) -> bool:
        """Ceiling or ground."""
        return bird.y <= 0 or bird.y + BIRD_HEIGHT >= self.GROUND_Y

    def hits_pipe(self, bird: Bird, pipe: Pipe) -> bool:
        left = bird.x + HITBOX_INSET_X
        right = bird.x + BIRD_WIDTH - HITBOX_INSET_X
        if not (right > pipe.x and left < pipe.x + PIPE_WIDTH):
            return False

        top = bird.y + HITBOX_INSET_Y
        bottom = bird.y + BIRD_HEIGHT - HITBOX_INSET_Y
        return top < pipe.gap_top or bottom > pipe.gap_bottom

    def check_collision(self, bird: Bird, pipes: List[Pipe]) -> bool:
        """Checks for collisions with floor, ceiling, or pipes."""
        if self.hits_bounds(bird):
            return True
        return any(self.hits_pipe(bird, pipe) for pipe in pipes)
