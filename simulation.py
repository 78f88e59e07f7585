# simulation.py
"""
Handles the core simulation logic.

This module advances every particle along the Lorenz attractor, projects the
attractor state into the two margin bands of the surface, computes the margin
opacity mask, and keeps the spatial index current. The SimulationContext
class ties these together and owns all mutable simulation state.
"""
import logging
from dataclasses import dataclass

import numpy as np
from numba import jit

from particle import ParticleSystem, Side
from spatial_index import SpatialIndex
from constants import (
    LORENZ_SIGMA, LORENZ_RHO, LORENZ_BETA, LORENZ_DT,
    LORENZ_BOUND_XY, LORENZ_Z_MIN, LORENZ_Z_MAX,
    NOISE_SPEED, NOISE_SCALE, LORENZ_INFLUENCE, NOISE_WEIGHT_X, NOISE_WEIGHT_Y,
    MARGIN_PERCENT, FADE_ZONE_PERCENT, BAND_OVERSCAN_PERCENT, SCREEN_OVERSCAN,
    VERTICAL_PADDING_PERCENT, CONNECTION_DISTANCE
)

# --- Data Contracts ---
#
# class SimulationContext:
#   - __init__(self, particles: ParticleSystem, width: int, height: int):
#     - Inputs:
#       - particles: An initialized ParticleSystem.
#       - width, height: Surface size in logical pixels.
#     - Side Effects: Computes margin geometry, allocates opacities and the
#       spatial index.
#
#   - resize(self, width: int, height: int) -> None:
#     - Side Effects: Recomputes dimensions and margin geometry.
#
#   - step(self) -> None:
#     - Side Effects: Advances time, integrates and projects every particle,
#       recomputes opacities, then rebuilds the spatial index.
#     - Invariants: After step() every attractor state lies within the
#       respawn bounds. The index always reflects the current positions.


@jit(nopython=True)
def _integrate_lorenz_numba(positions, sigma, rho, beta, dt, bound_xy, z_min, z_max):
    """
    Numba-jitted explicit Euler step of the Lorenz system for every particle.

    Positions are updated in place. Returns a boolean mask of particles that
    left the bounds and must be respawned by the caller.
    """
    particle_count = positions.shape[0]
    escaped = np.zeros(particle_count, dtype=np.bool_)

    for i in range(particle_count):
        x = positions[i, 0]
        y = positions[i, 1]
        z = positions[i, 2]

        dx = sigma * (y - x) * dt
        dy = (x * (rho - z) - y) * dt
        dz = (x * y - beta * z) * dt

        x += dx
        y += dy
        z += dz

        positions[i, 0] = x
        positions[i, 1] = y
        positions[i, 2] = z

        if x < -bound_xy or x > bound_xy or y < -bound_xy or y > bound_xy or z > z_max or z < z_min:
            escaped[i] = True

    return escaped


def integrate_lorenz(particles: ParticleSystem, dt: float = LORENZ_DT) -> int:
    """
    Advances every particle by one Euler step and respawns the escapees.

    Returns:
        int: The number of particles respawned this step.
    """
    escaped = _integrate_lorenz_numba(
        particles.positions, LORENZ_SIGMA, LORENZ_RHO, LORENZ_BETA, dt,
        LORENZ_BOUND_XY, LORENZ_Z_MIN, LORENZ_Z_MAX
    )
    indices = np.flatnonzero(escaped)
    particles.respawn(indices)
    return len(indices)


def smooth_noise(x, y, t):
    """
    Smooth pseudo-random field built from a few sine waves.

    Works on scalars and NumPy arrays alike. The result stays within [-1, 1].
    """
    return (np.sin(x * 1.3 + t) * np.cos(y * 0.9 + t * 0.7) * 0.5 +
            np.sin(x * 2.1 - t * 0.5) * np.sin(y * 1.7 + t * 0.3) * 0.3 +
            np.cos(x * 0.8 + y * 1.1 + t * 0.9) * 0.2)


@dataclass(frozen=True)
class MarginGeometry:
    """Cached horizontal layout of the two margin bands."""
    width: float
    height: float
    center_x: float
    margin_width: float
    fade_zone: float
    inner_edge: float

    @classmethod
    def from_size(cls, width: float, height: float) -> "MarginGeometry":
        center_x = width / 2
        margin_width = width * MARGIN_PERCENT
        return cls(
            width=float(width),
            height=float(height),
            center_x=center_x,
            margin_width=margin_width,
            fade_zone=width * FADE_ZONE_PERCENT,
            inner_edge=center_x - margin_width,
        )


def project_to_screen(particles: ParticleSystem, geometry: MarginGeometry, time: float) -> None:
    """
    Maps every particle's attractor state into its margin band.

    Each particle is anchored at the fractional part of its noise seed and
    perturbed by the attractor state and the noise field, so it keeps a
    stable territory while wandering continuously. Writes
    `screen_positions` and `depth_scales` in place.
    """
    pos = particles.positions
    seeds = particles.noise_seeds
    width, height = geometry.width, geometry.height
    margin_width = geometry.margin_width

    norm_x = (pos[:, 0] + 25.0) * 0.02
    norm_y = (pos[:, 1] + 25.0) * 0.02
    norm_z = pos[:, 2] * 0.02

    noise_x = smooth_noise(seeds[:, 0] * NOISE_SCALE, seeds[:, 1] * NOISE_SCALE, time)
    noise_y = smooth_noise(seeds[:, 1] * NOISE_SCALE + 50.0, seeds[:, 0] * NOISE_SCALE + 50.0, time * 0.8)

    anchor_weight = 1.0 - LORENZ_INFLUENCE
    blended_x = (seeds[:, 0] % 1.0) * anchor_weight + norm_x * LORENZ_INFLUENCE
    blended_y = (seeds[:, 1] % 1.0) * anchor_weight + norm_y * LORENZ_INFLUENCE

    final_x = blended_x + noise_x * NOISE_WEIGHT_X
    final_y = blended_y + noise_y * NOISE_WEIGHT_Y

    band_reach = margin_width + width * BAND_OVERSCAN_PERCENT
    right_inner = width - band_reach
    left = particles.sides == Side.LEFT

    screen_x = np.where(
        left,
        np.clip(final_x * margin_width * 1.2, -SCREEN_OVERSCAN, band_reach),
        np.clip(right_inner + final_x * margin_width * 1.2, right_inner, width + SCREEN_OVERSCAN),
    )

    padding = height * VERTICAL_PADDING_PERCENT
    screen_y = np.clip(padding + final_y * (height - padding * 2), -SCREEN_OVERSCAN, height + SCREEN_OVERSCAN)

    particles.screen_positions[:, 0] = screen_x
    particles.screen_positions[:, 1] = screen_y
    particles.depth_scales[:] = 0.7 + norm_z * 0.3


def margin_opacity(screen_x: float, geometry: MarginGeometry) -> float:
    """
    Visibility of a particle at `screen_x`.

    Zero inside the empty centre zone, a linear ramp across the fade zone
    just outside the inner edge, one beyond it.
    """
    dist_from_center = abs(screen_x - geometry.center_x)
    if dist_from_center < geometry.inner_edge:
        return 0.0

    pos_in_margin = dist_from_center - geometry.inner_edge
    if pos_in_margin < geometry.fade_zone:
        return pos_in_margin / geometry.fade_zone

    return 1.0


def margin_opacities(screen_x: np.ndarray, geometry: MarginGeometry) -> np.ndarray:
    """Vectorised `margin_opacity` over an array of horizontal positions."""
    pos_in_margin = np.abs(screen_x - geometry.center_x) - geometry.inner_edge
    if geometry.fade_zone <= 0:
        return (pos_in_margin >= 0).astype(np.float64)
    return np.clip(pos_in_margin / geometry.fade_zone, 0.0, 1.0)


class SimulationContext:
    """
    Owns all mutable simulation state: the particles, simulation time,
    surface geometry, per-particle opacities and the spatial index.
    """
    def __init__(self, particles: ParticleSystem, width: int, height: int):
        """
        Initializes the simulation context.

        Args:
            particles (ParticleSystem): The swarm to simulate.
            width (int): Surface width in logical pixels.
            height (int): Surface height in logical pixels.
        """
        self.particles = particles
        self.time = 0.0
        self.frame_count = 0
        self.respawn_count = 0
        self.opacities = np.zeros(particles.particle_count, dtype=np.float64)
        self.spatial_index = SpatialIndex(CONNECTION_DISTANCE)
        self.resize(width, height)

        logging.info("Simulation context initialized.")

    @property
    def width(self) -> float:
        return self.geometry.width

    @property
    def height(self) -> float:
        return self.geometry.height

    def resize(self, width: int, height: int) -> None:
        """Recomputes the surface dimensions and the cached margin geometry."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}.")
        self.geometry = MarginGeometry.from_size(width, height)
        logging.debug(
            f"Margin geometry for {width}x{height}: "
            f"inner edge {self.geometry.inner_edge:.1f}px, "
            f"fade zone {self.geometry.fade_zone:.1f}px."
        )

    def step(self, time_increment: float = NOISE_SPEED) -> None:
        """
        Executes one simulation frame.
        """
        self.time += time_increment
        self.frame_count += 1

        # 1. Integrate the attractor, respawning any particle that escaped
        self.respawn_count += integrate_lorenz(self.particles)

        # 2. Project into the margin bands
        project_to_screen(self.particles, self.geometry, self.time)

        # 3. Opacity mask
        self.opacities[:] = margin_opacities(self.particles.screen_positions[:, 0], self.geometry)

        # 4. Rebuild the index only once every particle has its new position
        self.spatial_index.rebuild(self.particles.screen_positions)
