import os

# Must be set before pygame opens any display.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import logging

import numpy as np
import pytest

from particle import ParticleSystem, ColorClass
from simulation import SimulationContext


class RecordingCanvas:
    """Canvas double that records every draw call."""

    def __init__(self, width=1000, height=800):
        self.width = width
        self.height = height
        self.fills = []
        self.lines = []
        self.blits = []
        self.clears = 0

    def clear(self):
        self.clears += 1

    def fill_rect(self, rect, color, alpha):
        self.fills.append((rect, color, alpha))

    def stroke_line(self, start, end, color, alpha, width):
        self.lines.append((start, end, color, alpha, width))

    def blit(self, image, rect, alpha):
        self.blits.append((image, rect, alpha))


class VirtualClock:
    """Manually advanced millisecond clock standing in for the display driver."""

    def __init__(self, start_ms=0.0):
        self.now_ms = start_ms

    def advance(self, ms):
        self.now_ms += ms
        return self.now_ms


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def sprites():
    return {ColorClass.PRIMARY: "primary-sprite", ColorClass.ACCENT: "accent-sprite"}


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def context():
    particles = ParticleSystem(np.random.default_rng(1234))
    return SimulationContext(particles, 1000, 800)


@pytest.fixture
def place():
    def _place(context, positions, sides=None, opacities=None):
        """Puts particles at fixed screen positions and rebuilds the index."""
        particles = context.particles
        positions = np.asarray(positions, dtype=np.float64)
        particles.screen_positions[:] = positions
        if sides is not None:
            particles.sides[:] = sides
        if opacities is None:
            opacities = np.ones(len(positions))
        context.opacities[:] = opacities
        context.spatial_index.rebuild(particles.screen_positions)
    return _place


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
