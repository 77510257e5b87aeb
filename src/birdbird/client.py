"""
client.py: pygame front end.

Feeds input events to the engine, pumps the frame scheduler, and draws
whatever state the engine hands back.
"""

import logging
import math
import random
from typing import Optional

import pygame

from .clock import FrameCallback, Scheduler
from .constants import (
    BIRD_HEIGHT, BIRD_WIDTH, DB_FILE, FIELD_HEIGHT, FIELD_WIDTH, GROUND_HEIGHT,
    PIPE_WIDTH, TARGET_FPS
)
from .data_models import GameState, Phase
from .engine import GameEngine
from .events import GameListener
from .scores import Leaderboard, ScoreKeeper
from .settings import Difficulty, GameConfig
from .storage import KeyValueStore, MemoryStore, SQLiteStore, StorageError

logger = logging.getLogger(__name__)

# Poll faster than the simulation so the clock's frame cap decides the step rate
RENDER_FPS = TARGET_FPS * 2
INPUT_DEBOUNCE_MS = 100
SPEED_INCREMENT = 0.1

FLAP_KEYS = (pygame.K_SPACE, pygame.K_UP)
FASTER_KEYS = (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS)
SLOWER_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)

SKY = (45, 27, 105)
PIPE_COLOR = (45, 74, 34)
GROUND_COLOR = (45, 80, 22)
BIRD_COLOR = (255, 235, 59)
WHITE = (255, 255, 255)
MUTED = (200, 200, 200)
ACCENT = (100, 255, 218)


class PygameScheduler(Scheduler):
    """Holds the next frame callback until the main loop pumps it."""

    def __init__(self):
        self.pending: Optional[FrameCallback] = None

    def now(self) -> float:
        return float(pygame.time.get_ticks())

    def schedule_next_tick(self, callback: FrameCallback):
        self.pending = callback

    def cancel(self):
        self.pending = None

    def pump(self) -> bool:
        callback, self.pending = self.pending, None
        if callback is None:
            return False
        callback(self.now())
        return True


def open_store(db_file: str) -> KeyValueStore:
    """SQLite store, or an in-memory one if the database can't be opened."""
    try:
        return SQLiteStore(db_file)
    except StorageError as e:
        logger.warning(f"Persistence unavailable, scores will not be kept: {e}")
        return MemoryStore()


class FlappyClient(GameListener):
    def __init__(self, player_name: str, db_file: str = DB_FILE,
                 store: Optional[KeyValueStore] = None, rng: Optional[random.Random] = None):
        pygame.init()
        self.player_name = player_name
        self.screen = pygame.display.set_mode((FIELD_WIDTH, FIELD_HEIGHT))
        pygame.display.set_caption("BirdBird")

        # --- Game Logic ---
        self.store = store if store is not None else open_store(db_file)
        self.config = GameConfig(self.store)
        self.config.load()
        self.scores = ScoreKeeper(self.store)
        self.leaderboard = Leaderboard(self.store)

        self.scheduler = PygameScheduler()
        self.engine = GameEngine(self.config, self.scores, self.scheduler,
                                 rng=rng, render=self._draw_game)
        self.engine.add_listener(self)

        # Time Management
        self.clock = pygame.time.Clock()
        self.last_input_ms = -INPUT_DEBOUNCE_MS
        self.last_rank: Optional[int] = None
        self._fonts = None

    # -------- Listener hooks --------

    def on_game_start(self):
        self.last_rank = None

    def on_game_over(self, score: int, best_score: int):
        if score > 0 and self.leaderboard.is_top_score(score):
            self.leaderboard.submit(self.player_name, score)
            self.last_rank = self.leaderboard.rank_of(score)
            logger.info(f"{self.player_name} placed #{self.last_rank} with {score}")

    # -------- Input --------

    def _primary_action(self, now_ms: int):
        if now_ms - self.last_input_ms < INPUT_DEBOUNCE_MS:
            return
        self.last_input_ms = now_ms

        if self.engine.phase is Phase.PLAYING:
            self.engine.flap()
        elif self.engine.phase in (Phase.START, Phase.GAME_OVER):
            self.engine.start_game()

    def _toggle_pause(self):
        if self.engine.phase is Phase.PLAYING:
            self.engine.pause()
        elif self.engine.phase is Phase.PAUSED:
            self.engine.resume()

    def _cycle_difficulty(self):
        order = list(Difficulty)
        current = order.index(self.config.settings.difficulty)
        self.config.set_difficulty(order[(current + 1) % len(order)])

    def handle_event(self, event, now_ms: Optional[int] = None) -> bool:
        """Applies one pygame event. Returns False when the game should quit."""
        now_ms = pygame.time.get_ticks() if now_ms is None else now_ms

        if event.type == pygame.QUIT:
            return False
        if event.type in (pygame.MOUSEBUTTONDOWN, pygame.FINGERDOWN):
            self._primary_action(now_ms)
        elif event.type == pygame.WINDOWFOCUSLOST:
            self.engine.pause()
        elif event.type == pygame.WINDOWFOCUSGAINED:
            self.engine.resume()
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key in FLAP_KEYS:
                self._primary_action(now_ms)
            elif event.key == pygame.K_p:
                self._toggle_pause()
            elif event.key == pygame.K_d:
                self._cycle_difficulty()
            elif event.key == pygame.K_f:
                self.config.set_show_fps(not self.config.settings.show_fps)
            elif event.key == pygame.K_m:
                self.config.set_sound_enabled(not self.config.settings.sound_enabled)
            elif event.key in FASTER_KEYS:
                self.config.set_speed_multiplier(self.config.speed_multiplier + SPEED_INCREMENT)
            elif event.key in SLOWER_KEYS:
                self.config.set_speed_multiplier(self.config.speed_multiplier - SPEED_INCREMENT)
        return True

    # -------- Main loop --------

    def run(self):
        """The main client execution loop."""
        running = True
        while running:
            self.clock.tick(RENDER_FPS)

            for event in pygame.event.get():
                if not self.handle_event(event):
                    running = False

            # While playing the engine calls _draw_game after each step
            if not self.scheduler.pump():
                self._draw_game(self.engine.state)

        if isinstance(self.store, SQLiteStore):
            self.store.close()
        pygame.quit()

    # -------- Rendering --------

    def _font(self, size: str):
        if self._fonts is None:
            self._fonts = {"large": pygame.font.Font(None, 48), "small": pygame.font.Font(None, 22)}
        return self._fonts[size]

    def _blit_centered(self, text: str, y: int, size: str = "small", color=WHITE):
        surf = self._font(size).render(text, True, color)
        self.screen.blit(surf, (FIELD_WIDTH // 2 - surf.get_width() // 2, y))

    def _draw_game(self, state: GameState):
        """Renders the game state using Pygame."""
        screen = self.screen
        screen.fill(SKY)
        ground_y = FIELD_HEIGHT - GROUND_HEIGHT

        # Draw Pipes
        for pipe in state.pipes:
            pygame.draw.rect(screen, PIPE_COLOR, (pipe.x, 0, PIPE_WIDTH, pipe.gap_top))
            pygame.draw.rect(screen, PIPE_COLOR,
                             (pipe.x, pipe.gap_bottom, PIPE_WIDTH, ground_y - pipe.gap_bottom))

        pygame.draw.rect(screen, GROUND_COLOR, (0, ground_y, FIELD_WIDTH, GROUND_HEIGHT))

        # Draw Bird
        bird = state.bird
        body = pygame.Surface((BIRD_WIDTH, BIRD_HEIGHT), pygame.SRCALPHA)
        pygame.draw.ellipse(body, BIRD_COLOR, body.get_rect())
        body = pygame.transform.rotate(body, -math.degrees(bird.rotation))
        center = (bird.x + BIRD_WIDTH / 2, bird.y + BIRD_HEIGHT / 2)
        screen.blit(body, body.get_rect(center=center))

        # HUD
        if state.phase is Phase.PLAYING:
            self._blit_centered(str(state.score), 40, "large")
        elif state.phase is Phase.PAUSED:
            self._blit_centered("Paused - P to resume", FIELD_HEIGHT // 2 - 10)
        else:
            self._draw_menu(state)

        if self.config.settings.show_fps:
            fps = self._font("small").render(f"FPS: {self.engine.fps}", True, ACCENT)
            screen.blit(fps, (10, 10))

        pygame.display.flip()

    def _draw_menu(self, state: GameState):
        if state.phase is Phase.GAME_OVER:
            self._blit_centered("Game Over", 40, "large")
            self._blit_centered(f"Score {state.score}   Best {self.scores.best_score}", 85)
            if self.last_rank is not None:
                self._blit_centered(f"New leaderboard rank #{self.last_rank}", 105, color=ACCENT)
        else:
            self._blit_centered("BirdBird", 40, "large")
            self._blit_centered(f"Best {self.scores.best_score}", 85)

        settings = self.config.settings
        self._blit_centered(
            f"{settings.difficulty.value}  x{settings.speed_multiplier:.1f}  "
            f"sound {'on' if settings.sound_enabled else 'off'}", 130, color=MUTED)

        for i, entry in enumerate(self.leaderboard.entries):
            self._blit_centered(f"{i + 1}. {entry.name} - {entry.score}", 160 + i * 20)

        self._blit_centered("Space / Click = Flap | P = Pause | Esc = Quit", FIELD_HEIGHT - 40, color=MUTED)
