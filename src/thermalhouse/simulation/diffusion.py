"""
Explicit Diffusion Solver
=========================
Advances a padded temperature matrix under the 2D heat equation

    dT/dt = alpha * (d²T/dx² + d²T/dz²)

with the explicit Forward-Time Central-Space (FTCS) scheme on a uniform grid.

The matrix carries one ring of boundary cells around the interior. Those cells
are never updated here: their values (Neumann replicas or Dirichlet injections)
come from the boundary mapper every tick. Interior cells flagged in the
constraint mask are frozen for the step.

Note: This module is pure NumPy/Numba and holds no state between calls.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
import numba as nb

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# FTCS in 2D is stable for r = alpha*dt/dx² <= 1/4
STABILITY_LIMIT = 0.25
DEFAULT_MAX_SUB_STEPS = 100_000


class ThermalDiffusivity:
    """
    Common thermal diffusivities at room temperature [m²/s].
    """
    AIR = 2.0e-5
    WATER = 1.43e-4
    CONCRETE = 5.0e-7
    WOOD = 9.0e-8
    STEEL = 1.2e-5


@nb.jit(cache=True)
def _ftcs_step(
    temperatures: npt.NDArray[np.float64],
    constraints: npt.NDArray[np.uint8],
    r: float,
    out: npt.NDArray[np.float64]
) -> None:
    """
    Apply one FTCS update of the interior cells into `out`.

    Args:
        temperatures: (W+2, H+2) current temperatures.
        constraints: (W+2, H+2) mask, non-zero = frozen.
        r: Diffusion number of the step, must be <= STABILITY_LIMIT.
        out: (W+2, H+2) output; ring cells are copied unchanged.
    """
    nx, nz = temperatures.shape
    out[:, :] = temperatures
    for i in range(1, nx - 1):
        for j in range(1, nz - 1):
            if constraints[i, j] != 0:
                continue
            t_c = temperatures[i, j]
            # 5-point Laplacian stencil
            out[i, j] = t_c + r * (
                temperatures[i + 1, j] + temperatures[i - 1, j]
                + temperatures[i, j + 1] + temperatures[i, j - 1]
                - 4.0 * t_c
            )


def diffusion_number(alpha: float, delta_time: float, dx: float) -> float:
    """Dimensionless diffusion number r = alpha * dt / dx²."""
    return alpha * delta_time / (dx * dx)


def required_sub_steps(r: float, max_sub_steps: int = DEFAULT_MAX_SUB_STEPS) -> int:
    """
    Number of equal sub-steps needed to bring a step with diffusion number r
    under the stability limit.

    Args:
        r: Diffusion number of the whole step.
        max_sub_steps: Upper bound on the returned count.

    Returns:
        1 if the step is already stable, else ceil(r / STABILITY_LIMIT), capped.
    """
    if r <= STABILITY_LIMIT:
        return 1
    return min(math.ceil(r / STABILITY_LIMIT), max_sub_steps)


def _check_inputs(
    temperatures: npt.NDArray[np.float64],
    constraints: npt.NDArray[np.uint8],
    delta_time: float,
    alpha: float,
    dx: float
) -> None:
    if temperatures.ndim != 2:
        raise ValueError(f"Expected a 2D temperature matrix, got shape {temperatures.shape}.")
    if constraints.shape != temperatures.shape:
        raise ValueError(
            f"Constraint mask shape {constraints.shape} does not match temperatures {temperatures.shape}."
        )
    if not math.isfinite(alpha) or alpha <= 0:
        raise ValueError(f"alpha must be a positive finite number, got {alpha}")
    if not math.isfinite(dx) or dx <= 0:
        raise ValueError(f"dx must be a positive finite number, got {dx}")
    if not math.isfinite(delta_time) or delta_time < 0:
        raise ValueError(f"delta_time must be a non-negative finite number, got {delta_time}")


def compute_step(
    temperatures: npt.NDArray[np.float64],
    constraints: npt.NDArray[np.uint8],
    delta_time: float,
    alpha: float = ThermalDiffusivity.AIR,
    dx: float = 1.0,
    max_sub_steps: int = DEFAULT_MAX_SUB_STEPS
) -> npt.NDArray[np.float64]:
    """
    Advance the padded matrix by one physical time step.

    If the diffusion number of the whole step exceeds the stability limit, the
    step is split into ceil(r / 0.25) equal sub-steps, each of which is stable.
    When that count exceeds max_sub_steps, max_sub_steps sub-steps at the
    stability limit are run and the rest of delta_time is dropped.

    Args:
        temperatures: (W+2, H+2) temperatures; not modified.
        constraints: (W+2, H+2) mask, 1 = frozen cell.
        delta_time: Time step in seconds.
        alpha: Thermal diffusivity in m²/s.
        dx: Grid spacing in meters.
        max_sub_steps: Upper bound on sub-steps per call.

    Returns:
        New (W+2, H+2) temperature matrix.
    """
    temperatures = np.asarray(temperatures, dtype=np.float64)
    constraints = np.asarray(constraints, dtype=np.uint8)
    _check_inputs(temperatures, constraints, delta_time, alpha, dx)

    r = diffusion_number(alpha, delta_time, dx)
    sub_steps = required_sub_steps(r, max_sub_steps)
    if sub_steps > 1:
        logger.debug(f"Stability condition violated: r = {r:.4f} > {STABILITY_LIMIT}. Using {sub_steps} sub-steps.")
    if sub_steps < math.ceil(r / STABILITY_LIMIT):
        r_sub = STABILITY_LIMIT
        simulated = sub_steps * STABILITY_LIMIT * dx * dx / alpha
        logger.warning(
            f"Diffusion number r = {r:.4g} exceeds {max_sub_steps} stable sub-steps; "
            f"simulating {simulated:.4g} s of {delta_time:.4g} s, {delta_time - simulated:.4g} s dropped."
        )
    else:
        r_sub = r / sub_steps

    current = temperatures.copy()
    if temperatures.shape[0] < 3 or temperatures.shape[1] < 3:
        # No interior cells
        return current

    scratch = np.empty_like(current)
    for _ in range(sub_steps):
        _ftcs_step(current, constraints, r_sub, scratch)
        current, scratch = scratch, current
    return current


def simulate(
    temperatures: npt.NDArray[np.float64],
    constraints: npt.NDArray[np.uint8],
    total_time: float,
    time_step: float,
    alpha: float = ThermalDiffusivity.AIR,
    dx: float = 1.0,
    max_sub_steps: int = DEFAULT_MAX_SUB_STEPS
) -> npt.NDArray[np.float64]:
    """
    Run floor(total_time / time_step) consecutive steps with a fixed mask.

    Returns:
        Final (W+2, H+2) temperature matrix.
    """
    if not math.isfinite(time_step) or time_step <= 0:
        raise ValueError(f"time_step must be a positive finite number, got {time_step}")
    n_steps = math.floor(total_time / time_step)

    current = np.asarray(temperatures, dtype=np.float64).copy()
    for _ in range(n_steps):
        current = compute_step(current, constraints, time_step, alpha=alpha, dx=dx, max_sub_steps=max_sub_steps)
    return current


def stable_time_step(dx: float, alpha: float = ThermalDiffusivity.AIR, safety_factor: float = 0.8) -> float:
    """
    Largest time step for which a single FTCS step stays stable, with margin.

    Args:
        dx: Grid spacing in meters.
        alpha: Thermal diffusivity in m²/s.
        safety_factor: Fraction of the theoretical limit to use.

    Returns:
        Time step in seconds.
    """
    if dx <= 0 or alpha <= 0:
        raise ValueError("dx and alpha must be positive.")
    return safety_factor * STABILITY_LIMIT * dx * dx / alpha
