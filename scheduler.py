# scheduler.py
"""
Frame-rate throttled driver of the simulation and rendering pipeline.

The FrameScheduler does not own a timer. An external driver calls tick()
with a millisecond timestamp on every iteration of its loop; each call is
one potential frame and the scheduler decides whether to do any work.
"""
import logging
from enum import Enum
from typing import Any, Mapping, Optional

from particle import ColorClass
from simulation import SimulationContext
from rendering import check_sprites, draw_background, draw_connections, draw_particles
from constants import FRAME_INTERVAL_MS

# --- Data Contracts ---
#
# class FrameScheduler:
#   - __init__(self, context, canvas, sprites, frame_interval_ms):
#     - Raises ValueError if a colour class has no sprite.
#
#   - tick(self, now_ms: float) -> FrameState:
#     - HIDDEN: the surface is not visible, nothing is done.
#     - THROTTLED_WAIT: less than frame_interval_ms since the last frame.
#     - ACTIVE: one full frame was simulated and drawn.
#     - Invariants: Simulation time advances by a fixed increment per ACTIVE
#       tick, never by elapsed wall-clock time.
#
#   - set_visible(self, visible: bool) -> None
#   - resize(self, width: int, height: int) -> None


class FrameState(Enum):
    HIDDEN = "hidden"
    THROTTLED_WAIT = "throttled-wait"
    ACTIVE = "active"


class FrameScheduler:
    """
    Gates frames on visibility and the target frame interval, and runs the
    per-frame pipeline in order.
    """
    def __init__(
        self,
        context: SimulationContext,
        canvas,
        sprites: Mapping[ColorClass, Any],
        frame_interval_ms: float = FRAME_INTERVAL_MS
    ):
        check_sprites(sprites)

        self.context = context
        self.canvas = canvas
        self.sprites = dict(sprites)
        self.frame_interval_ms = frame_interval_ms

        self.visible = True
        self.last_frame_time: Optional[float] = None
        self.state = FrameState.THROTTLED_WAIT

        self.frames_rendered = 0
        self.ticks_skipped = 0
        self.last_connection_count = 0
        self.last_particles_drawn = 0

        logging.info(f"Frame scheduler initialized ({1000.0 / frame_interval_ms:.0f} FPS target).")

    def set_visible(self, visible: bool) -> None:
        """Pauses or resumes rendering. Time does not advance while hidden."""
        if visible != self.visible:
            logging.info(f"Surface {'visible' if visible else 'hidden'}; rendering {'resumed' if visible else 'paused'}.")
        self.visible = visible

    def resize(self, width: int, height: int) -> None:
        """Adopts a new surface size and clears the canvas. Empty sizes are ignored."""
        if width <= 0 or height <= 0:
            logging.warning(f"Ignoring resize to degenerate surface size {width}x{height}.")
            return
        self.context.resize(width, height)
        self.canvas.clear()
        logging.info(f"Surface resized to {width}x{height}.")

    def tick(self, now_ms: float) -> FrameState:
        """
        Handles one callback from the driver.

        Args:
            now_ms (float): Monotonic timestamp in milliseconds.

        Returns:
            FrameState: The branch taken for this tick.
        """
        if not self.visible:
            self.state = FrameState.HIDDEN
        elif self.last_frame_time is not None and now_ms - self.last_frame_time < self.frame_interval_ms:
            self.state = FrameState.THROTTLED_WAIT
        else:
            self.last_frame_time = now_ms
            self._run_frame()
            self.state = FrameState.ACTIVE

        if self.state is not FrameState.ACTIVE:
            self.ticks_skipped += 1
        return self.state

    def _run_frame(self) -> None:
        draw_background(self.canvas)
        self.context.step()
        self.last_connection_count = draw_connections(self.canvas, self.context)
        self.last_particles_drawn = draw_particles(self.canvas, self.context, self.sprites)
        self.frames_rendered += 1
