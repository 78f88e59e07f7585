# rendering.py
"""
Draws the simulation state onto a canvas.

The functions here only depend on the canvas contract below, so the same
code drives the pygame window and the recording canvas used in tests.
"""
import logging
import math
from typing import Any, List, Mapping, Tuple

from particle import ColorClass
from simulation import SimulationContext
from constants import (
    BACKGROUND_COLOR, BACKGROUND_ALPHA,
    CONNECTION_DISTANCE, CONNECTION_DISTANCE_SQ, CONNECTION_ALPHA,
    CONNECTION_COLOR, CONNECTION_LINE_WIDTH, VISIBILITY_THRESHOLD, SPRITE_SCALE
)

# --- Data Contracts ---
#
# Canvas (duck-typed, see visualization.PygameCanvas):
#   - width, height: Logical surface size in pixels.
#   - fill_rect(rect, color, alpha) -> None
#       rect: (x, y, w, h); color: (r, g, b); alpha: float in [0, 1].
#   - stroke_line(start, end, color, alpha, width) -> None
#   - blit(image, rect, alpha) -> None
#       Draws `image` stretched to rect (x, y, w, h).
#   - clear() -> None
#
# Sprites: Mapping[ColorClass, image], one entry per colour class.

Connection = Tuple[int, int, float]


def check_sprites(sprites: Mapping[ColorClass, Any]) -> None:
    """
    Validates the sprite mapping before any frame is drawn.

    Raises:
        ValueError: If a colour class has no sprite.
    """
    missing = [color_class.name for color_class in ColorClass if color_class not in sprites]
    if missing:
        msg = (
            f"Configuration error: no glow sprite for colour class(es) {', '.join(missing)}. "
            f"Every colour class needs a sprite."
        )
        logging.critical(msg)
        raise ValueError(msg)


def draw_background(canvas) -> None:
    """Lays a faint tint over the previous frame, leaving soft trails."""
    canvas.fill_rect((0, 0, canvas.width, canvas.height), BACKGROUND_COLOR, BACKGROUND_ALPHA)


def find_connections(context: SimulationContext) -> List[Connection]:
    """
    Finds every pair of nearby, visible, same-side particles.

    Candidates come from the spatial index, so the index must be current.
    Each unordered pair is reported once as (i, j, alpha) with i < j.
    """
    particles = context.particles
    positions = particles.screen_positions
    sides = particles.sides
    opacities = context.opacities
    index = context.spatial_index

    connections = []
    for i in range(particles.particle_count):
        opacity_i = opacities[i]
        if opacity_i < VISIBILITY_THRESHOLD:
            continue

        x1, y1 = positions[i]
        for j in index.neighbors(i):
            if j <= i or sides[i] != sides[j]:
                continue

            opacity_j = opacities[j]
            if opacity_j < VISIBILITY_THRESHOLD:
                continue

            dx = positions[j, 0] - x1
            dy = positions[j, 1] - y1
            dist_sq = dx * dx + dy * dy
            if dist_sq >= CONNECTION_DISTANCE_SQ:
                continue

            dist = math.sqrt(dist_sq)
            alpha = (1.0 - dist / CONNECTION_DISTANCE) * CONNECTION_ALPHA * min(opacity_i, opacity_j)
            if alpha > VISIBILITY_THRESHOLD:
                connections.append((i, j, float(alpha)))
    return connections


def draw_connections(canvas, context: SimulationContext) -> int:
    """
    Strokes a faint line for every connection.

    Returns:
        int: The number of lines drawn.
    """
    positions = context.particles.screen_positions
    connections = find_connections(context)
    for i, j, alpha in connections:
        canvas.stroke_line(
            (positions[i, 0], positions[i, 1]),
            (positions[j, 0], positions[j, 1]),
            CONNECTION_COLOR, alpha, CONNECTION_LINE_WIDTH
        )
    return len(connections)


def draw_particles(canvas, context: SimulationContext, sprites: Mapping[ColorClass, Any]) -> int:
    """
    Blits a glow sprite for every visible particle.

    Returns:
        int: The number of particles drawn.
    """
    particles = context.particles
    opacities = context.opacities
    drawn = 0
    for i in range(particles.particle_count):
        opacity = opacities[i]
        if opacity <= VISIBILITY_THRESHOLD:
            continue

        half_extent = particles.sizes[i] * particles.depth_scales[i] * SPRITE_SCALE
        x, y = particles.screen_positions[i]
        canvas.blit(
            sprites[ColorClass(particles.color_classes[i])],
            (x - half_extent, y - half_extent, half_extent * 2, half_extent * 2),
            opacity * particles.brightness[i]
        )
        drawn += 1
    return drawn
