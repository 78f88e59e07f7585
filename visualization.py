# visualization.py
"""
Handles the pygame side of the effect: opening the window, the canvas the
renderers draw on, the pre-rendered glow sprites, and translating window
events into resize and visibility changes.
"""
import logging
from typing import Dict, Tuple

import numpy as np
import pygame

from particle import ColorClass
from constants import (
    BACKGROUND_COLOR, SPRITE_SIZE, SPRITE_CENTER_COLOR, SPRITE_MID_STOP,
    SPRITE_MID_ALPHA, PRIMARY_COLOR, ACCENT_COLOR, MAX_PIXEL_SCALE
)

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from scheduler import FrameScheduler


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, fullscreen: bool, window_size: Tuple[int, int]):
#     - Side Effects: Initializes pygame, opens the window, pre-renders sprites.
#     - Raises SurfaceUnavailableError if no window can be opened.
#
#   - poll_events(self, scheduler: FrameScheduler) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Forwards resize and visibility changes to the scheduler.

CLASS_COLORS = {
    ColorClass.PRIMARY: PRIMARY_COLOR,
    ColorClass.ACCENT: ACCENT_COLOR,
}


class SurfaceUnavailableError(RuntimeError):
    """Raised when no drawing surface can be acquired."""


def create_glow_sprite(color: Tuple[int, int, int], size: int = SPRITE_SIZE) -> pygame.Surface:
    """
    Renders a square radial glow: cream centre, `color` mid ring, transparent edge.
    """
    center = size / 2
    coords = np.arange(size) + 0.5
    dist = np.hypot(coords[:, np.newaxis] - center, coords[np.newaxis, :] - center) / center
    dist = np.clip(dist, 0.0, 1.0)

    stops = [0.0, SPRITE_MID_STOP, 1.0]
    cream = SPRITE_CENTER_COLOR
    channels = [
        np.interp(dist, stops, [cream[0], color[0], 0]),
        np.interp(dist, stops, [cream[1], color[1], 0]),
        np.interp(dist, stops, [cream[2], color[2], 0]),
    ]
    alpha = np.interp(dist, stops, [cream[3], SPRITE_MID_ALPHA, 0.0]) * 255

    sprite = pygame.Surface((size, size), pygame.SRCALPHA)
    pixels = pygame.surfarray.pixels3d(sprite)
    pixels[...] = np.stack(channels, axis=-1).round().astype(np.uint8)
    del pixels  # Unlock the surface
    pixels_alpha = pygame.surfarray.pixels_alpha(sprite)
    pixels_alpha[...] = alpha.round().astype(np.uint8)
    del pixels_alpha
    return sprite


def create_glow_sprites() -> Dict[ColorClass, pygame.Surface]:
    """Pre-renders one glow sprite per colour class."""
    logging.debug("Pre-rendering glow sprites...")
    sprites = {color_class: create_glow_sprite(color) for color_class, color in CLASS_COLORS.items()}
    logging.debug(f"Finished pre-rendering {len(sprites)} glow sprites.")
    return sprites


def _to_alpha(alpha: float) -> int:
    return max(0, min(255, int(round(alpha * 255))))


class PygameCanvas:
    """
    Canvas contract implemented on a pygame surface.

    Alpha blending is done by drawing onto per-pixel alpha surfaces and
    blitting them, since pygame's draw functions ignore colour alpha on
    opaque surfaces.

    `pixel_scale` (drawable pixels per window pixel, capped) is reported
    for the surface contract only; drawing always uses surface pixels.
    """
    def __init__(self, surface: pygame.Surface, pixel_scale: float = 1.0):
        self.surface = surface
        self.pixel_scale = min(pixel_scale, MAX_PIXEL_SCALE)
        self._tint_surface = None

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def clear(self) -> None:
        self.surface.fill(BACKGROUND_COLOR)

    def fill_rect(self, rect, color, alpha: float) -> None:
        x, y, w, h = (int(round(v)) for v in rect)
        if w <= 0 or h <= 0:
            return
        # Reuse the tint surface across frames; it only changes on resize.
        if self._tint_surface is None or self._tint_surface.get_size() != (w, h):
            self._tint_surface = pygame.Surface((w, h), pygame.SRCALPHA)
        self._tint_surface.fill((color[0], color[1], color[2], _to_alpha(alpha)))
        self.surface.blit(self._tint_surface, (x, y))

    def stroke_line(self, start, end, color, alpha: float, width: float) -> None:
        line_width = max(1, int(round(width)))
        left = int(min(start[0], end[0])) - line_width
        top = int(min(start[1], end[1])) - line_width
        w = int(abs(end[0] - start[0])) + line_width * 2 + 1
        h = int(abs(end[1] - start[1])) + line_width * 2 + 1

        layer = pygame.Surface((w, h), pygame.SRCALPHA)
        pygame.draw.line(
            layer,
            (color[0], color[1], color[2], _to_alpha(alpha)),
            (start[0] - left, start[1] - top),
            (end[0] - left, end[1] - top),
            line_width
        )
        self.surface.blit(layer, (left, top))

    def blit(self, image: pygame.Surface, rect, alpha: float) -> None:
        x, y, w, h = rect
        size = (max(1, int(round(w))), max(1, int(round(h))))
        scaled = pygame.transform.smoothscale(image, size)
        scaled.set_alpha(_to_alpha(alpha))
        self.surface.blit(scaled, (int(round(x)), int(round(y))))


class Visualizer:
    """
    Owns the pygame window and translates its events into lifecycle calls.
    """
    def __init__(self, fullscreen: bool, window_size: Tuple[int, int]):
        """
        Initializes pygame and opens the display window.

        Raises:
            SurfaceUnavailableError: If the display cannot be opened.
        """
        try:
            pygame.init()
            if fullscreen:
                display_info = pygame.display.Info()
                size = (display_info.current_w, display_info.current_h)
                self.screen = pygame.display.set_mode(size, pygame.FULLSCREEN)
            else:
                self.screen = pygame.display.set_mode(window_size, pygame.RESIZABLE)
        except pygame.error as e:
            msg = f"Could not open a drawing surface: {e}"
            logging.critical(msg)
            pygame.quit()
            raise SurfaceUnavailableError(msg) from e

        pygame.display.set_caption("Lorenz Ethereal Network")
        self.clock = pygame.time.Clock()

        window_width = pygame.display.get_window_size()[0] or self.screen.get_width()
        self.canvas = PygameCanvas(self.screen, self.screen.get_width() / window_width)
        self.canvas.clear()

        self.sprites = create_glow_sprites()

        logging.info(
            f"Visualizer initialized with pygame display ({self.canvas.width}x{self.canvas.height}, "
            f"pixel scale {self.canvas.pixel_scale:.1f})."
        )

    @property
    def size(self) -> Tuple[int, int]:
        return self.canvas.width, self.canvas.height

    def poll_events(self, scheduler: "FrameScheduler") -> bool:
        """
        Handles pending window events.

        Returns:
            bool: False if the effect should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

            if event.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.get_surface()
                self.canvas.surface = self.screen
                scheduler.resize(*self.size)
            elif event.type in (pygame.WINDOWMINIMIZED, pygame.WINDOWHIDDEN):
                scheduler.set_visible(False)
            elif event.type in (pygame.WINDOWRESTORED, pygame.WINDOWSHOWN, pygame.WINDOWEXPOSED):
                scheduler.set_visible(True)
        return True

    def now_ms(self) -> int:
        """Milliseconds since pygame was initialized."""
        return pygame.time.get_ticks()

    def present(self, driver_fps: int) -> None:
        """Shows the drawn frame and waits for the next driver iteration."""
        pygame.display.flip()
        self.clock.tick(driver_fps)

    def close(self):
        """Shuts down pygame."""
        pygame.quit()
