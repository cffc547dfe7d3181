"""
Thermal Field
=============
Owns the discretized temperature field of the terrain and runs one simulation
tick per call.

Why is this file needed?
------------------------
1. State: it holds the only long-lived simulation data, a fixed-size array of
   grid points (position, temperature, colour) in row-major order.
2. Orchestration: each tick it asks the BoundaryMapper for the padded matrix,
   advances it with the diffusion solver and writes the interior back.
3. Read interface: the renderer builds its instanced draw call once from
   `points` (or the numpy views) and only refreshes colours afterwards; the
   index of a point, row * cols + col, never changes.

Classes:
    GridPoint: Immutable read snapshot of one point.
    TickMetrics: Instrumentation of one update call.
    ThermalField: The field itself.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import time
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Tuple

import numpy as np

from thermalhouse.config import SimulationConfig
from thermalhouse.model.color import temperatures_to_rgb
from thermalhouse.model.entities import AirConditioner, Door, EntitySnapshot, Heater, Window
from thermalhouse.simulation.boundary import BoundaryMapper, FieldGeometry, InteriorRegion
from thermalhouse.simulation.diffusion import compute_step, diffusion_number, required_sub_steps

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridPoint:
    x: float
    z: float
    temperature: float
    color: Tuple[float, float, float]  # RGB in [0, 1]


@dataclass(frozen=True)
class TickMetrics:
    """What happened during one ThermalField.update call."""
    delta_time: float
    diffusion_number: float
    sub_steps: int
    iterations: int
    degraded: bool
    interior_mean: float
    interior_min: float
    interior_max: float
    elapsed: float  # wall-clock seconds spent in update


MetricsCallback = Callable[[TickMetrics], None]


def _read_only(array: npt.NDArray) -> npt.NDArray:
    view = array.view()
    view.flags.writeable = False
    return view


class ThermalField:
    """
    Uniform grid of temperature points over [min_x, max_x] x [min_z, max_z].

    Point (col, row) sits at (min_x + col / density, min_z + row / density)
    and is stored at index row * cols + col.
    """

    def __init__(
        self,
        min_x: float,
        max_x: float,
        min_z: float,
        max_z: float,
        density: float,
        config: Optional[SimulationConfig] = None,
        metrics_callback: Optional[MetricsCallback] = None
    ) -> None:
        """
        Initialize the field with the binary exterior/interior split.

        Args:
            min_x, max_x, min_z, max_z: Bounds of the terrain in meters.
            density: Points per meter (step = 1 / density), must be > 0.
            config: Session parameters; defaults to SimulationConfig().
            metrics_callback: Optional callable receiving TickMetrics after each update.
        """
        if not math.isfinite(density) or density <= 0:
            raise ValueError(f"density must be a positive finite number, got {density}")
        if not all(math.isfinite(v) for v in (min_x, max_x, min_z, max_z)):
            raise ValueError("Field bounds must be finite.")
        if max_x < min_x or max_z < min_z:
            raise ValueError(f"Invalid field bounds: x [{min_x}, {max_x}], z [{min_z}, {max_z}]")

        self.config = config if config is not None else SimulationConfig()
        self.config.validate()

        self.min_x = min_x
        self.max_x = max_x
        self.min_z = min_z
        self.max_z = max_z
        self.density = density
        self.metrics_callback = metrics_callback

        # Tolerance keeps e.g. 20 * 3 from losing a column to rounding
        self.cols = math.floor((max_x - min_x) * density + 1e-9) + 1
        self.rows = math.floor((max_z - min_z) * density + 1e-9) + 1

        col_index = np.tile(np.arange(self.cols), self.rows)
        row_index = np.repeat(np.arange(self.rows), self.cols)
        self._x = min_x + col_index / density
        self._z = min_z + row_index / density

        inner_half = self.config.house.inner_half
        self._inside = (
            (self._x > -inner_half) & (self._x < inner_half)
            & (self._z > -inner_half) & (self._z < inner_half)
        )

        self._temperature = np.empty(self.cols * self.rows, dtype=np.float64)
        self._colors = np.empty((self.cols * self.rows, 3), dtype=np.float64)

        self.geometry = FieldGeometry(min_x=min_x, min_z=min_z, density=density, cols=self.cols, rows=self.rows)
        self._mapper = BoundaryMapper(self.geometry, self.config.house, self.config.climate)
        self._region_indices = self._indices_of(self._mapper.region)
        self._degraded = False

        self.reset(self.config.initial_exterior, self.config.initial_interior)

        logger.info(
            f"Thermal field initialized: {self.cols}x{self.rows} points, step {self.step:g} m, "
            f"interior region {self.region.width}x{self.region.height}."
        )

    # ---------------------------------------------------------------
    # Geometry
    # ---------------------------------------------------------------
    @property
    def step(self) -> float:
        return 1.0 / self.density

    @property
    def shape(self) -> Tuple[int, int]:
        """(rows, cols)"""
        return self.rows, self.cols

    @property
    def region(self) -> InteriorRegion:
        return self._mapper.region

    @property
    def mapper(self) -> BoundaryMapper:
        return self._mapper

    def __len__(self) -> int:
        return self.cols * self.rows

    def index_of(self, col: int, row: int) -> int:
        if not (0 <= col < self.cols and 0 <= row < self.rows):
            raise IndexError(f"Point ({col}, {row}) outside a {self.cols}x{self.rows} field.")
        return row * self.cols + col

    def _indices_of(self, region: InteriorRegion) -> npt.NDArray[np.int64]:
        if not region.is_valid:
            return np.empty(0, dtype=np.int64)
        rows = np.arange(region.start_j, region.end_j + 1)
        cols = np.arange(region.start_i, region.end_i + 1)
        return (rows[:, None] * self.cols + cols[None, :]).ravel()

    # ---------------------------------------------------------------
    # Read interface
    # ---------------------------------------------------------------
    @property
    def x(self) -> npt.NDArray[np.float64]:
        return _read_only(self._x)

    @property
    def z(self) -> npt.NDArray[np.float64]:
        return _read_only(self._z)

    @property
    def temperatures(self) -> npt.NDArray[np.float64]:
        return _read_only(self._temperature)

    @property
    def colors(self) -> npt.NDArray[np.float64]:
        """(N, 3) RGB colours, same order as the points."""
        return _read_only(self._colors)

    @property
    def inside_mask(self) -> npt.NDArray[np.bool_]:
        """True for points strictly inside the house footprint."""
        return _read_only(self._inside)

    @property
    def points(self) -> Tuple[GridPoint, ...]:
        return tuple(
            GridPoint(x=float(x), z=float(z), temperature=float(t), color=(float(c[0]), float(c[1]), float(c[2])))
            for x, z, t, c in zip(self._x, self._z, self._temperature, self._colors)
        )

    def temperature_grid(self) -> npt.NDArray[np.float64]:
        """Copy of the temperatures as a (rows, cols) array."""
        return self._temperature.reshape(self.rows, self.cols).copy()

    # ---------------------------------------------------------------
    # Mutation
    # ---------------------------------------------------------------
    def _recolor(self, indices: Optional[npt.NDArray[np.int64]] = None) -> None:
        scale = self.config.color_scale
        if indices is None:
            self._colors[:] = temperatures_to_rgb(self._temperature, scale.min_temperature, scale.max_temperature)
        elif indices.size:
            self._colors[indices] = temperatures_to_rgb(
                self._temperature[indices], scale.min_temperature, scale.max_temperature
            )

    def reset(self, exterior_temp: float, interior_temp: float) -> None:
        """Assign interior_temp inside the house footprint and exterior_temp elsewhere."""
        self._temperature[:] = np.where(self._inside, interior_temp, exterior_temp)
        self._recolor()

    def update(
        self,
        delta_time: float,
        exterior_temp: float,
        interior_temp: float,
        doors: Iterable[Door] = (),
        windows: Iterable[Window] = (),
        heaters: Iterable[Heater] = (),
        acs: Iterable[AirConditioner] = ()
    ) -> TickMetrics:
        """
        Advance the field by one tick.

        Args:
            delta_time: Frame time in seconds.
            exterior_temp: Outside temperature, injected through open doors/windows.
            interior_temp: Inside temperature, used only when the house is not
                represented in this field (no diffusion then).
            doors, windows, heaters, acs: Entities of this tick.

        Returns:
            Metrics of the tick (also passed to the metrics callback).
        """
        snapshot = EntitySnapshot.of(doors=doors, windows=windows, heaters=heaters, air_conditioners=acs)
        return self.update_snapshot(delta_time, exterior_temp, interior_temp, snapshot)

    def update_snapshot(
        self,
        delta_time: float,
        exterior_temp: float,
        interior_temp: float,
        snapshot: EntitySnapshot
    ) -> TickMetrics:
        """Same as update, taking a prepared EntitySnapshot."""
        start = time.perf_counter()
        config = self.config

        payload = self._mapper.build(self._temperature, snapshot, exterior_temp)

        if payload is None:
            if not self._degraded:
                logger.warning(
                    "House footprint is not inside the field bounds; assigning exterior/interior temperatures directly."
                )
                self._degraded = True
            self._temperature[:] = np.where(self._inside, interior_temp, exterior_temp)
            self._recolor()
            r, sub_steps, iterations = 0.0, 0, 0
            touched = self._inside
        else:
            if self._degraded:
                logger.info("Interior region available again; diffusion resumed.")
                self._degraded = False

            r = diffusion_number(config.alpha, delta_time, self.step)
            sub_steps = required_sub_steps(r, config.max_sub_steps)
            iterations = config.iterations_per_tick

            current = payload.temperatures
            for _ in range(iterations):
                current = compute_step(
                    current,
                    payload.constraints,
                    delta_time,
                    alpha=config.alpha,
                    dx=self.step,
                    max_sub_steps=config.max_sub_steps,
                )

            region = payload.region
            grid = self._temperature.reshape(self.rows, self.cols)
            grid[region.start_j:region.end_j + 1, region.start_i:region.end_i + 1] = \
                current[1:region.width + 1, 1:region.height + 1].T
            self._recolor(self._region_indices)
            touched = self._region_indices

        interior = self._temperature[touched]
        if interior.size:
            stats = float(interior.mean()), float(interior.min()), float(interior.max())
        else:
            stats = math.nan, math.nan, math.nan

        metrics = TickMetrics(
            delta_time=delta_time,
            diffusion_number=r,
            sub_steps=sub_steps,
            iterations=iterations,
            degraded=payload is None,
            interior_mean=stats[0],
            interior_min=stats[1],
            interior_max=stats[2],
            elapsed=time.perf_counter() - start,
        )
        if self.metrics_callback is not None:
            self.metrics_callback(metrics)
        return metrics
