"""Unit tests for the explicit FTCS diffusion solver"""

import numpy as np
import pytest

from thermalhouse.simulation.diffusion import (
    STABILITY_LIMIT,
    ThermalDiffusivity,
    compute_step,
    diffusion_number,
    required_sub_steps,
    simulate,
    stable_time_step,
)


def _border_mask(shape):
    mask = np.zeros(shape, dtype=np.uint8)
    mask[0, :] = mask[-1, :] = 1
    mask[:, 0] = mask[:, -1] = 1
    return mask


def test_uniform_field_is_fixed_point():
    """A uniform field has zero net flux and does not change"""
    temps = np.full((9, 7), 21.5)
    result = compute_step(temps, _border_mask(temps.shape), 0.016, alpha=0.01, dx=0.5)
    np.testing.assert_allclose(result, temps, rtol=0, atol=1e-12)


def test_single_stencil_value():
    """Hand-computed 5-point update of the only interior cell"""
    temps = np.array([
        [0.0, 4.0, 0.0],
        [4.0, 0.0, 4.0],
        [0.0, 4.0, 0.0],
    ])
    # r = 1 * 0.1 / 1 = 0.1 -> 0 + 0.1 * (16 - 0)
    result = compute_step(temps, _border_mask(temps.shape), 0.1, alpha=1.0, dx=1.0)
    assert result[1, 1] == pytest.approx(1.6)


def test_constrained_cells_keep_their_value():
    """Frozen cells are copied unchanged whatever their neighbours are"""
    rng = np.random.default_rng(42)
    temps = rng.uniform(-10.0, 45.0, size=(12, 10))
    constraints = _border_mask(temps.shape)
    constraints[3:6, 4:7] = 1
    constraints[8, 2] = 1

    result = compute_step(temps, constraints, 1.0, alpha=0.2, dx=1.0)

    frozen = constraints == 1
    np.testing.assert_array_equal(result[frozen], temps[frozen])
    # Free cells did evolve
    assert not np.allclose(result[~frozen], temps[~frozen])


def test_outer_ring_is_never_updated():
    """Ring cells are boundary values even when the mask leaves them free"""
    rng = np.random.default_rng(1)
    temps = rng.uniform(0.0, 30.0, size=(8, 8))
    constraints = np.zeros(temps.shape, dtype=np.uint8)

    result = compute_step(temps, constraints, 0.2, alpha=1.0, dx=1.0)

    np.testing.assert_array_equal(result[0, :], temps[0, :])
    np.testing.assert_array_equal(result[-1, :], temps[-1, :])
    np.testing.assert_array_equal(result[:, 0], temps[:, 0])
    np.testing.assert_array_equal(result[:, -1], temps[:, -1])


def test_inputs_are_not_mutated():
    temps = np.zeros((5, 5))
    temps[2, 2] = 100.0
    original = temps.copy()
    compute_step(temps, _border_mask(temps.shape), 5.0, alpha=1.0, dx=1.0)
    np.testing.assert_array_equal(temps, original)


def test_sub_stepping_matches_two_half_steps():
    """An unstable step equals two stable half steps applied in sequence"""
    rng = np.random.default_rng(7)
    temps = rng.uniform(-10.0, 45.0, size=(10, 14))
    constraints = _border_mask(temps.shape)
    constraints[4, 4] = 1
    alpha, dx = 1.0, 1.0

    # r = 0.4 > 0.25 -> two sub-steps of r = 0.2
    assert diffusion_number(alpha, 0.4, dx) > STABILITY_LIMIT
    once = compute_step(temps, constraints, 0.4, alpha=alpha, dx=dx)

    half = compute_step(temps, constraints, 0.2, alpha=alpha, dx=dx)
    twice = compute_step(half, constraints, 0.2, alpha=alpha, dx=dx)

    np.testing.assert_allclose(once, twice, rtol=1e-12, atol=1e-12)


def test_large_time_step_stays_bounded():
    """Sub-stepping keeps the explicit scheme inside the initial range"""
    temps = np.full((20, 20), -10.0)
    temps[10, 10] = 45.0
    constraints = _border_mask(temps.shape)

    result = compute_step(temps, constraints, 50.0, alpha=0.01, dx=0.5)

    assert np.all(np.isfinite(result))
    assert result.max() <= 45.0 + 1e-9
    assert result.min() >= -10.0 - 1e-9


def test_capped_step_runs_at_the_stability_limit(caplog):
    """Hitting the sub-step cap drops time instead of running unstable sub-steps"""
    temps = np.full((20, 20), -10.0)
    temps[10, 10] = 45.0
    constraints = _border_mask(temps.shape)

    # r = 0.01 * 50 / 0.25 = 2.0 -> 8 sub-steps needed, 2 allowed
    with caplog.at_level("WARNING", logger="thermalhouse.simulation.diffusion"):
        capped = compute_step(temps, constraints, 50.0, alpha=0.01, dx=0.5, max_sub_steps=2)
    # 2 sub-steps at r = 0.25 cover 2 * 0.25 * 0.25 / 0.01 = 12.5 s
    expected = compute_step(temps, constraints, 12.5, alpha=0.01, dx=0.5)

    np.testing.assert_allclose(capped, expected, rtol=1e-12, atol=1e-12)
    assert capped.max() <= 45.0 + 1e-9
    assert capped.min() >= -10.0 - 1e-9
    assert "37.5 s dropped" in caplog.text


def test_required_sub_steps():
    assert required_sub_steps(0.0) == 1
    assert required_sub_steps(0.25) == 1
    assert required_sub_steps(0.26) == 2
    assert required_sub_steps(1.0) == 4
    assert required_sub_steps(1.01) == 5
    assert required_sub_steps(1000.0, max_sub_steps=10) == 10


@pytest.mark.parametrize("kwargs", [
    {"delta_time": -1.0},
    {"delta_time": float("nan")},
    {"alpha": 0.0},
    {"alpha": -0.01},
    {"dx": 0.0},
])
def test_invalid_arguments_raise(kwargs):
    temps = np.zeros((4, 4))
    args = {"delta_time": 0.1, "alpha": 0.01, "dx": 0.5}
    args.update(kwargs)
    with pytest.raises(ValueError):
        compute_step(temps, _border_mask(temps.shape), args["delta_time"], alpha=args["alpha"], dx=args["dx"])


def test_mismatched_mask_raises():
    with pytest.raises(ValueError):
        compute_step(np.zeros((4, 4)), np.zeros((4, 5), dtype=np.uint8), 0.1)


def test_simulate_runs_floor_of_steps():
    temps = np.zeros((6, 6))
    temps[3, 3] = 10.0
    constraints = _border_mask(temps.shape)

    expected = temps
    for _ in range(3):
        expected = compute_step(expected, constraints, 0.1, alpha=1.0, dx=1.0)

    result = simulate(temps, constraints, total_time=0.35, time_step=0.1, alpha=1.0, dx=1.0)
    np.testing.assert_allclose(result, expected)


def test_stable_time_step():
    assert stable_time_step(0.5, alpha=0.01) == pytest.approx(5.0)
    dt = stable_time_step(1.0)
    assert diffusion_number(ThermalDiffusivity.AIR, dt, 1.0) <= STABILITY_LIMIT
