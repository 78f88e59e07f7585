# particle.py
"""
Manages the state of all particles in the swarm.

This module defines the ParticleSystem class, which is responsible for
initializing and storing particle data (attractor state, screen position,
noise seed, appearance) in NumPy arrays, one row per particle.
"""
import logging
from enum import IntEnum
from typing import Optional

import numpy as np

from constants import (
    PARTICLE_COUNT, PARTICLE_MIN_SIZE, PARTICLE_MAX_SIZE,
    PARTICLE_MIN_BRIGHTNESS, PRIMARY_COLOR_PROBABILITY,
    RESPAWN_XY_HALF_RANGE, RESPAWN_Z_MIN, RESPAWN_Z_MAX
)

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, rng: np.random.Generator, count: int = PARTICLE_COUNT):
#     - Inputs:
#       - rng: The generator used for creation and every later respawn.
#       - count: Number of particles. Fixed for the lifetime of the system.
#     - Outputs: None
#     - Side Effects: Initializes internal NumPy arrays for particle state.
#     - Invariants:
#       - self.positions is a float64 array of shape (N, 3).
#       - self.screen_positions is a float64 array of shape (N, 2).
#       - self.noise_seeds is a float64 array of shape (N, 2), never modified.
#       - self.sides and self.color_classes are int32 arrays of shape (N,),
#         never modified after creation.
#
#   - respawn(self, indices: np.ndarray) -> None:
#     - Side Effects: Replaces the attractor state of the given rows in place.


class Side(IntEnum):
    """Margin band a particle is confined to."""
    LEFT = 0
    RIGHT = 1


class ColorClass(IntEnum):
    """Appearance category, selects the glow sprite."""
    PRIMARY = 0
    ACCENT = 1


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, rng: np.random.Generator, count: int = PARTICLE_COUNT):
        """
        Initializes the particle system.

        The first half of the particles is assigned to the left margin,
        the rest to the right margin.

        Args:
            rng (np.random.Generator): Source of all randomness.
            count (int): The number of particles.
        """
        if count < 1:
            raise ValueError(f"Particle count must be positive, got {count}.")

        self.particle_count = count
        self.rng = rng

        self.positions = np.column_stack((
            rng.uniform(-15.0, 15.0, size=count),
            rng.uniform(-15.0, 15.0, size=count),
            rng.uniform(10.0, 40.0, size=count),
        ))
        self.screen_positions = np.zeros((count, 2), dtype=np.float64)
        self.noise_seeds = rng.uniform(0.0, 100.0, size=(count, 2))
        self.sizes = rng.uniform(PARTICLE_MIN_SIZE, PARTICLE_MAX_SIZE, size=count)
        self.brightness = PARTICLE_MIN_BRIGHTNESS + rng.random(count) * (1.0 - PARTICLE_MIN_BRIGHTNESS)
        self.color_classes = np.where(
            rng.random(count) < PRIMARY_COLOR_PROBABILITY,
            ColorClass.PRIMARY, ColorClass.ACCENT
        ).astype(np.int32)

        half = count // 2
        self.sides = np.full(count, Side.RIGHT, dtype=np.int32)
        self.sides[:half] = Side.LEFT

        self.depth_scales = np.ones(count, dtype=np.float64)

        logging.info(
            f"ParticleSystem initialized with {count} particles "
            f"({half} left, {count - half} right)."
        )
        logging.debug(
            f"Accent particles: {int(np.sum(self.color_classes == ColorClass.ACCENT))}. "
            f"Positions shape: {self.positions.shape}"
        )

    def respawn(self, indices: np.ndarray) -> None:
        """Moves the given particles to fresh random points near the origin."""
        n = len(indices)
        if n == 0:
            return
        self.positions[indices, 0] = self.rng.uniform(-RESPAWN_XY_HALF_RANGE, RESPAWN_XY_HALF_RANGE, size=n)
        self.positions[indices, 1] = self.rng.uniform(-RESPAWN_XY_HALF_RANGE, RESPAWN_XY_HALF_RANGE, size=n)
        self.positions[indices, 2] = self.rng.uniform(RESPAWN_Z_MIN, RESPAWN_Z_MAX, size=n)


def create_particles(seed: Optional[int] = None, count: int = PARTICLE_COUNT) -> ParticleSystem:
    """Builds a ParticleSystem with a dedicated generator seeded from `seed`."""
    return ParticleSystem(np.random.default_rng(seed), count)
