from types import MappingProxyType

import numpy as np
import pytest

from particle import ParticleSystem, ColorClass
from simulation import SimulationContext
from scheduler import FrameScheduler, FrameState
from constants import NOISE_SPEED, FRAME_INTERVAL_MS, BACKGROUND_COLOR


@pytest.fixture
def scheduler(context, canvas, sprites):
    return FrameScheduler(context, canvas, sprites)


def test_first_tick_renders_a_frame(scheduler, clock):
    state = scheduler.tick(clock.now_ms)

    assert state is FrameState.ACTIVE
    assert scheduler.frames_rendered == 1
    assert scheduler.context.time == pytest.approx(NOISE_SPEED)


def test_ticks_inside_frame_interval_are_throttled(scheduler, clock):
    scheduler.tick(clock.now_ms)

    state = scheduler.tick(clock.advance(FRAME_INTERVAL_MS / 2))

    assert state is FrameState.THROTTLED_WAIT
    assert scheduler.frames_rendered == 1
    assert scheduler.context.time == pytest.approx(NOISE_SPEED)

    assert scheduler.tick(clock.advance(FRAME_INTERVAL_MS / 2)) is FrameState.ACTIVE
    assert scheduler.frames_rendered == 2


def test_hidden_surface_skips_work_until_visible_again(scheduler, clock):
    scheduler.tick(clock.now_ms)
    scheduler.set_visible(False)

    for _ in range(5):
        assert scheduler.tick(clock.advance(1000.0)) is FrameState.HIDDEN
    assert scheduler.frames_rendered == 1
    assert scheduler.ticks_skipped == 5

    scheduler.set_visible(True)
    assert scheduler.tick(clock.advance(1.0)) is FrameState.ACTIVE
    assert scheduler.context.time == pytest.approx(2 * NOISE_SPEED)


def test_time_advances_per_frame_not_per_elapsed_time(scheduler, clock):
    for gap in (0.0, 5000.0, 40.0, 60000.0):
        assert scheduler.tick(clock.advance(gap)) is FrameState.ACTIVE

    assert scheduler.context.time == pytest.approx(4 * NOISE_SPEED)


def test_active_frame_draws_background_connections_and_particles(scheduler, canvas, clock):
    scheduler.tick(clock.now_ms)

    assert canvas.fills[0][1] == BACKGROUND_COLOR
    assert len(canvas.lines) == scheduler.last_connection_count
    assert len(canvas.blits) == scheduler.last_particles_drawn
    assert scheduler.last_particles_drawn > 0


def test_skipped_ticks_draw_nothing(scheduler, canvas, clock):
    scheduler.tick(clock.now_ms)
    fills, blits = len(canvas.fills), len(canvas.blits)

    scheduler.tick(clock.advance(1.0))
    scheduler.set_visible(False)
    scheduler.tick(clock.advance(100.0))

    assert len(canvas.fills) == fills
    assert len(canvas.blits) == blits


def test_resize_updates_geometry_and_clears(scheduler, canvas):
    scheduler.resize(1600, 900)

    assert scheduler.context.geometry.width == 1600.0
    assert scheduler.context.geometry.center_x == 800.0
    assert canvas.clears == 1


def test_missing_sprite_prevents_scheduler_creation(context, canvas):
    with pytest.raises(ValueError):
        FrameScheduler(context, canvas, {ColorClass.PRIMARY: "only-primary"})


def test_same_seed_and_clock_give_identical_runs(canvas, sprites):
    runs = []
    for _ in range(2):
        context = SimulationContext(ParticleSystem(np.random.default_rng(77)), 1200, 700)
        scheduler = FrameScheduler(context, canvas, sprites)
        now = 0.0
        history = []
        for _ in range(60):
            if scheduler.tick(now) is FrameState.ACTIVE:
                history.append(context.particles.screen_positions.copy())
            now += 16.0
        runs.append(history)

    assert len(runs[0]) == len(runs[1]) > 0
    for a, b in zip(*runs):
        np.testing.assert_array_equal(a, b)


def test_degenerate_resize_is_ignored(scheduler, canvas):
    before = scheduler.context.geometry

    scheduler.resize(0, 600)
    scheduler.resize(800, 0)

    assert scheduler.context.geometry == before
    assert canvas.clears == 0


def test_scheduler_accepts_read_only_sprite_mapping(context, canvas, sprites, clock):
    scheduler = FrameScheduler(context, canvas, MappingProxyType(sprites))

    assert scheduler.tick(clock.now_ms) is FrameState.ACTIVE
