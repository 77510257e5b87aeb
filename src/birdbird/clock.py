"""
clock.py: Turns frame callbacks into capped, normalized simulation steps.

The clock never touches a platform timer directly. It asks a Scheduler for
the next frame callback, so tests drive it with ManualScheduler and the
pygame front end drives it with its own loop.
"""

from typing import Callable, Optional

from .constants import FPS_WINDOW_MS, FRAME_TIME_MS, MAX_DELTA_MS

FrameCallback = Callable[[float], None]


class Scheduler:
    """Delivers at most one pending frame callback with the current time in ms."""

    def now(self) -> float:
        raise NotImplementedError

    def schedule_next_tick(self, callback: FrameCallback):
        raise NotImplementedError

    def cancel(self):
        raise NotImplementedError


class ManualScheduler(Scheduler):
    """Scheduler whose time only moves when advance() is called."""

    def __init__(self, start_ms: float = 0.0):
        self.time_ms = start_ms
        self.pending: Optional[FrameCallback] = None

    def now(self) -> float:
        return self.time_ms

    def schedule_next_tick(self, callback: FrameCallback):
        self.pending = callback

    def cancel(self):
        self.pending = None

    def advance(self, ms: float) -> bool:
        """Moves time forward and fires the pending callback, if any."""
        self.time_ms += ms
        callback, self.pending = self.pending, None
        if callback is None:
            return False
        callback(self.time_ms)
        return True


class SimulationClock:
    """
    Frame-rate capped clock.

    A frame callback only produces a step when at least one target frame
    interval has elapsed; faster callbacks are dropped. The elapsed time is
    clamped to max_delta_ms and handed to on_step in units of nominal frames.
    """

    def __init__(self, scheduler: Scheduler, on_step: Callable[[float], None],
                 frame_time_ms: float = FRAME_TIME_MS, max_delta_ms: float = MAX_DELTA_MS):
        self.scheduler = scheduler
        self.on_step = on_step
        self.frame_time_ms = frame_time_ms
        self.max_delta_ms = max_delta_ms

        self.running = False
        self.last_tick_time = 0.0

        # Diagnostics only
        self.fps = 0
        self._frames_in_window = 0
        self._last_fps_update = 0.0

    def start(self):
        """Starts (or restarts) ticking from the current wall time."""
        now = self.scheduler.now()
        self.last_tick_time = now
        self._last_fps_update = now
        self._frames_in_window = 0
        self.running = True
        self.scheduler.schedule_next_tick(self._on_frame)

    def stop(self):
        self.running = False
        self.scheduler.cancel()

    def normalize(self, raw_delta_ms: float) -> float:
        return min(raw_delta_ms, self.max_delta_ms) / self.frame_time_ms

    def _on_frame(self, now: float):
        if not self.running:
            return

        raw_delta = now - self.last_tick_time
        if raw_delta >= self.frame_time_ms:
            self.last_tick_time = now
            self._count_frame(now)
            self.on_step(self.normalize(raw_delta))

        # on_step may have stopped the clock (game over)
        if self.running:
            self.scheduler.schedule_next_tick(self._on_frame)

    def _count_frame(self, now: float):
        self._frames_in_window += 1
        if now - self._last_fps_update >= FPS_WINDOW_MS:
            self.fps = self._frames_in_window
            self._frames_in_window = 0
            self._last_fps_update = now
