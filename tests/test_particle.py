import numpy as np
import pytest

from particle import ParticleSystem, Side, ColorClass, create_particles
from constants import PARTICLE_COUNT, PARTICLE_MIN_SIZE, PARTICLE_MAX_SIZE


def test_default_swarm_is_split_between_margins():
    particles = create_particles(seed=7)

    assert particles.particle_count == PARTICLE_COUNT
    assert np.all(particles.sides[:PARTICLE_COUNT // 2] == Side.LEFT)
    assert np.all(particles.sides[PARTICLE_COUNT // 2:] == Side.RIGHT)


def test_appearance_drawn_from_configured_ranges():
    particles = create_particles(seed=7, count=500)

    assert np.all((particles.sizes >= PARTICLE_MIN_SIZE) & (particles.sizes < PARTICLE_MAX_SIZE))
    assert np.all((particles.brightness >= 0.4) & (particles.brightness <= 1.0))
    assert set(np.unique(particles.color_classes)) <= {ColorClass.PRIMARY, ColorClass.ACCENT}
    # Roughly one in ten particles is an accent
    accent_share = np.mean(particles.color_classes == ColorClass.ACCENT)
    assert 0.03 < accent_share < 0.2


def test_initial_state_shapes_and_ranges():
    particles = create_particles(seed=3)

    assert particles.positions.shape == (PARTICLE_COUNT, 3)
    assert particles.screen_positions.shape == (PARTICLE_COUNT, 2)
    assert np.all(np.abs(particles.positions[:, :2]) <= 15.0)
    assert np.all((particles.positions[:, 2] >= 10.0) & (particles.positions[:, 2] <= 40.0))
    assert np.all((particles.noise_seeds >= 0.0) & (particles.noise_seeds < 100.0))


def test_same_seed_gives_same_swarm():
    a = create_particles(seed=99)
    b = create_particles(seed=99)

    np.testing.assert_array_equal(a.positions, b.positions)
    np.testing.assert_array_equal(a.noise_seeds, b.noise_seeds)
    np.testing.assert_array_equal(a.color_classes, b.color_classes)


def test_respawn_moves_only_selected_particles_near_origin():
    particles = ParticleSystem(np.random.default_rng(5), count=10)
    before = particles.positions.copy()

    particles.respawn(np.array([2, 4]))

    untouched = [i for i in range(10) if i not in (2, 4)]
    np.testing.assert_array_equal(particles.positions[untouched], before[untouched])
    for i in (2, 4):
        x, y, z = particles.positions[i]
        assert -10.0 <= x <= 10.0
        assert -10.0 <= y <= 10.0
        assert 15.0 <= z <= 35.0


def test_respawn_with_no_indices_is_a_no_op():
    particles = ParticleSystem(np.random.default_rng(5), count=4)
    before = particles.positions.copy()

    particles.respawn(np.array([], dtype=np.int64))

    np.testing.assert_array_equal(particles.positions, before)


def test_count_must_be_positive():
    with pytest.raises(ValueError):
        ParticleSystem(np.random.default_rng(0), count=0)
