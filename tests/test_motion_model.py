import numpy as np
import pytest

from kidnapped_vehicle.motion_model import (
    YAW_RATE_EPSILON,
    MotionModel,
    arc_motion,
    straight_motion,
)
from kidnapped_vehicle.particle import Particle


def test_zero_control_zero_noise_keeps_pose(rng):
    model = MotionModel([0.0, 0.0, 0.0], rng)
    particle = Particle(0, 1.5, -2.0, 0.7)
    model.sample_motion_model_velocity(particle, 0.1, 0.0, 0.0)
    assert (particle.x, particle.y, particle.theta) == (1.5, -2.0, 0.7)


def test_straight_line(rng):
    model = MotionModel([0.0, 0.0, 0.0], rng)
    x, y, theta = model.sample_real_model_velocity(0.0, 0.0, np.pi / 4, 2.0, 5.0, 0.0)
    assert x == pytest.approx(10.0 * np.cos(np.pi / 4))
    assert y == pytest.approx(10.0 * np.sin(np.pi / 4))
    assert theta == pytest.approx(np.pi / 4)


def test_quarter_circle(rng):
    # v/ω = 2 m radius, quarter turn to the left
    model = MotionModel([0.0, 0.0, 0.0], rng)
    x, y, theta = model.sample_real_model_velocity(0.0, 0.0, 0.0, 1.0, np.pi, np.pi / 2)
    assert x == pytest.approx(2.0)
    assert y == pytest.approx(2.0)
    assert theta == pytest.approx(np.pi / 2)


def test_known_step():
    # Values of the classic kidnapped vehicle quiz
    x, y, theta = arc_motion(102.0, 65.0, 5 * np.pi / 8, 0.1, 110.0, np.pi / 8)
    assert x == pytest.approx(97.59, abs=1e-2)
    assert y == pytest.approx(75.08, abs=1e-2)
    assert theta == pytest.approx(2.00, abs=1e-2)


def test_branches_agree_near_zero_yaw_rate():
    args = (3.0, -1.0, 0.3, 0.1, 12.0, 1e-5)
    curved = np.array(arc_motion(*args))
    straight = np.array(straight_motion(*args))
    np.testing.assert_allclose(curved, straight, atol=1e-5)


def test_epsilon_selects_straight_branch(rng):
    model = MotionModel([0.0, 0.0, 0.0], rng)
    yaw_rate = YAW_RATE_EPSILON / 2
    result = model.sample_real_model_velocity(0.0, 0.0, 0.2, 0.1, 10.0, yaw_rate)
    assert result == pytest.approx(list(straight_motion(0.0, 0.0, 0.2, 0.1, 10.0, yaw_rate)))
    assert np.all(np.isfinite(model.sample_real_model_velocity(0.0, 0.0, 0.2, 0.1, 10.0, 0.0)))


def test_heading_is_not_normalized(rng):
    model = MotionModel([0.0, 0.0, 0.0], rng)
    particle = Particle(0, 0.0, 0.0, 3.0)
    model.sample_motion_model_velocity(particle, 1.0, 1.0, 1.0)
    assert particle.theta == pytest.approx(4.0)


def test_noise_statistics():
    model = MotionModel([0.3, 0.2, 0.05], np.random.default_rng(7))
    particles = [Particle(i, 0.0, 0.0, 0.0) for i in range(5000)]
    for particle in particles:
        model.sample_motion_model_velocity(particle, 0.1, 0.0, 0.0)
    poses = np.array([particle.pose() for particle in particles])
    np.testing.assert_allclose(poses.mean(axis=0), [0.0, 0.0, 0.0], atol=0.02)
    np.testing.assert_allclose(poses.std(axis=0), [0.3, 0.2, 0.05], rtol=0.05)


def test_noise_is_drawn_per_particle(rng):
    model = MotionModel([0.1, 0.1, 0.1], rng)
    particles = [Particle(i, 0.0, 0.0, 0.0) for i in range(10)]
    for particle in particles:
        model.sample_motion_model_velocity(particle, 0.1, 1.0, 0.1)
    assert len({particle.x for particle in particles}) == 10


@pytest.mark.parametrize('std', [[0.1, 0.1], [0.1, -0.1, 0.1]])
def test_invalid_noise(rng, std):
    with pytest.raises(ValueError):
        MotionModel(std, rng)
