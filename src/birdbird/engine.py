"""
engine.py: The single-player simulation engine.

Owns the GameState, drives the phase machine
(START -> PLAYING <-> PAUSED, PLAYING -> GAME_OVER -> PLAYING) and runs the
per-step pipeline: gravity, spawn, scroll/cull, scoring, collision.
"""

import logging
import random
from typing import Callable, Optional

from .clock import Scheduler, SimulationClock
from .constants import FIELD_HEIGHT, FIELD_WIDTH, GAP_BOTTOM_MARGIN, MIN_GAP_TOP, PIPE_WIDTH
from .data_models import GameState, Phase, Pipe
from .events import GameListener, NotificationPort
from .physics_core import PhysicsCore
from .scores import ScoreKeeper
from .settings import GameConfig

logger = logging.getLogger(__name__)

RenderSink = Callable[[GameState], None]


class GameEngine(PhysicsCore):
    """
    Runs one player's session: phase changes, per-step simulation and
    notifications. Physics and collision come from PhysicsCore.
    """

    def __init__(self, config: GameConfig, scores: ScoreKeeper, scheduler: Scheduler,
                 rng: Optional[random.Random] = None, render: Optional[RenderSink] = None):
        super().__init__(config)
        self.scores = scores
        self.rng = rng or random.Random()
        self.render = render

        self.state = GameState()
        self.events = NotificationPort()
        self.clock = SimulationClock(scheduler, self._on_tick)

    def add_listener(self, listener: GameListener):
        self.events.add_listener(listener)

    def remove_listener(self, listener: GameListener):
        self.events.remove_listener(listener)

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def best_score(self) -> int:
        return self.scores.best_score

    @property
    def fps(self) -> int:
        return self.clock.fps

    def get_game_state(self) -> dict:
        return {
            "state": self.state.phase.value,
            "score": self.state.score,
            "high_score": self.scores.best_score,
        }

    # -------- Phase transitions --------

    def reset(self):
        """Restores bird, pipes, score and frame counter. Phase is untouched."""
        self.state.reset()

    def start_game(self) -> bool:
        if self.state.phase not in (Phase.START, Phase.GAME_OVER):
            logger.warning(f"start_game ignored in phase {self.state.phase.name}")
            return False

        self.reset()
        self.state.phase = Phase.PLAYING
        self.clock.start()
        logger.info("Game started")
        self.events.game_start()
        return True

    def flap(self) -> bool:
        if self.state.phase is not Phase.PLAYING:
            logger.debug(f"flap ignored in phase {self.state.phase.name}")
            return False

        self.state.bird.velocity = self.jump_velocity()
        self.events.flap()
        return True

    def pause(self) -> bool:
        if self.state.phase is not Phase.PLAYING:
            logger.debug(f"pause ignored in phase {self.state.phase.name}")
            return False

        self.state.phase = Phase.PAUSED
        self.clock.stop()
        logger.info("Game paused")
        return True

    def resume(self) -> bool:
        if self.state.phase is not Phase.PAUSED:
            logger.debug(f"resume ignored in phase {self.state.phase.name}")
            return False

        # Restarting the clock drops the time spent paused
        self.state.phase = Phase.PLAYING
        self.clock.start()
        logger.info("Game resumed")
        return True

    def _game_over(self):
        self.state.phase = Phase.GAME_OVER
        self.clock.stop()
        logger.info(f"Game over at frame {self.state.frame}: score {self.state.score}, "
                    f"best {self.scores.best_score}")
        self.events.game_over(self.state.score, self.scores.best_score)

    # -------- Simulation --------

    def _on_tick(self, dt: float):
        self.step(dt)
        if self.render is not None:
            self.render(self.state)

    def _spawn_pipe(self):
        """Generates a new pipe at the right edge of the field."""
        gap = self.config.pipe_gap
        max_top = FIELD_HEIGHT - gap - GAP_BOTTOM_MARGIN
        gap_top = self.rng.uniform(MIN_GAP_TOP, max_top)
        self.state.pipes.append(Pipe(x=float(FIELD_WIDTH), gap_top=gap_top, gap_bottom=gap_top + gap))

    def step(self, dt: float):
        """
        The main simulation step, dt in nominal frames.
        Mutates the game state; may end the game.
        """
        state = self.state
        if state.phase is not Phase.PLAYING:
            return
        bird = state.bird

        # 1. Gravity and movement
        self.apply_gravity_and_movement(bird, dt)

        # 2. Spawn
        if state.frame % self.config.spawn_interval() == 0:
            self._spawn_pipe()

        # 3. Scroll and cull
        distance = self.scroll_speed(state.score) * self.config.speed_multiplier * dt
        state.pipes = self.advance_pipes(state.pipes, distance)

        # 4. Score Update
        for pipe in state.pipes:
            if not pipe.scored and pipe.x + PIPE_WIDTH < bird.x:
                pipe.scored = True
                state.score += 1
                self.scores.record_score(state.score)
                self.events.score(state.score)

        # 5. Collisions, unless a score listener already left PLAYING
        collided = state.phase is Phase.PLAYING and self.check_collision(bird, state.pipes)

        # 6. Frame count, before game over listeners run
        state.frame += 1
        if collided:
            self._game_over()
