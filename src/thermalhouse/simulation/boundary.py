"""
Boundary Mapping
================
Translates the current field and the per-tick entity snapshot into the padded
matrix consumed by the diffusion solver.

Why is this file needed?
------------------------
1. Region: only the house footprint (walls included) diffuses. This module
   locates that footprint in grid indices.
2. Boundary conditions: the ring around the footprint defaults to zero flux
   (Neumann, replicated from the nearest interior cell); open doors and
   windows overwrite their wall segment with the exterior temperature
   (Dirichlet).
3. Sources: active heaters and air-conditioners pin the cells under their
   footprint to a fixed temperature and freeze them in the constraint mask.

Index convention: matrices are indexed [x, z]. Local index 0 of the interior
maps to field column start_i (row start_j); padded cell [x + 1, z + 1] holds
interior cell (x, z). North is the z = 0 border row, south z = H + 1, west the
x = 0 border column, east x = W + 1.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import numpy as np

from thermalhouse.config import ClimateTemperatures, HouseConfig
from thermalhouse.model.entities import Direction, Entity, EntitySnapshot
from thermalhouse.utils import clamp_index_range

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Tolerance for floor/ceil of coordinates that land on grid nodes
_INDEX_EPS = 1e-9


@dataclass(frozen=True)
class FieldGeometry:
    """Spatial layout of a uniform point grid."""
    min_x: float
    min_z: float
    density: float
    cols: int
    rows: int

    @property
    def step(self) -> float:
        return 1.0 / self.density


@dataclass(frozen=True)
class InteriorRegion:
    """Inclusive grid-index bounds of the house footprint."""
    start_i: int
    end_i: int
    start_j: int
    end_j: int
    origin_x: float
    origin_z: float
    inside_field: bool = True

    @property
    def width(self) -> int:
        return self.end_i - self.start_i + 1

    @property
    def height(self) -> int:
        return self.end_j - self.start_j + 1

    @property
    def is_valid(self) -> bool:
        return self.inside_field and self.width > 0 and self.height > 0

    @staticmethod
    def locate(geometry: FieldGeometry, inner_half: float) -> InteriorRegion:
        """
        Find the grid indices lying within ±inner_half of the origin.

        The region is invalid when the footprint is not entirely covered by
        the grid (field bounds smaller than the house, or shifted away from it).
        """
        d = geometry.density
        start_i = math.ceil((-inner_half - geometry.min_x) * d - _INDEX_EPS)
        end_i = math.floor((inner_half - geometry.min_x) * d + _INDEX_EPS)
        start_j = math.ceil((-inner_half - geometry.min_z) * d - _INDEX_EPS)
        end_j = math.floor((inner_half - geometry.min_z) * d + _INDEX_EPS)

        inside_field = (
            start_i >= 0 and end_i <= geometry.cols - 1
            and start_j >= 0 and end_j <= geometry.rows - 1
        )

        return InteriorRegion(
            start_i=start_i,
            end_i=end_i,
            start_j=start_j,
            end_j=end_j,
            origin_x=geometry.min_x + start_i / d,
            origin_z=geometry.min_z + start_j / d,
            inside_field=inside_field,
        )


@dataclass
class BoundaryPayload:
    """
    Per-tick input of the diffusion solver.

    Attributes:
        temperatures: (W+2, H+2) float64 matrix, boundary ring included.
        constraints: (W+2, H+2) uint8 mask, 1 = cell must not evolve.
        region: Grid-index bounds of the interior the matrix was seeded from.
    """
    temperatures: npt.NDArray[np.float64]
    constraints: npt.NDArray[np.uint8]
    region: InteriorRegion


def index_range(lo: float, hi: float, origin: float, density: float, size: int) -> Tuple[int, int]:
    """
    Local indices covered by the coordinate interval [lo, hi].

    The interval is widened to whole cells (floor of the start, ceil of the
    end) and clipped to [0, size - 1]. The result is empty when start > end.
    """
    start = math.floor((lo - origin) * density + _INDEX_EPS)
    end = math.ceil((hi - origin) * density - _INDEX_EPS)
    return clamp_index_range(start, end, size)


class BoundaryMapper:
    """
    Builds the padded temperature matrix and constraint mask for one tick.
    """

    def __init__(
        self,
        geometry: FieldGeometry,
        house: HouseConfig,
        climate: ClimateTemperatures
    ) -> None:
        self.geometry = geometry
        self.house = house
        self.climate = climate
        self.region = InteriorRegion.locate(geometry, house.inner_half)
        if self.region.is_valid:
            logger.debug(
                f"Interior region: columns {self.region.start_i}..{self.region.end_i}, "
                f"rows {self.region.start_j}..{self.region.end_j}."
            )
        else:
            logger.debug(f"House footprint ±{house.inner_half:g} m is not covered by the field grid.")

    def build(
        self,
        temperatures: npt.NDArray[np.float64],
        snapshot: EntitySnapshot,
        exterior_temp: float
    ) -> Optional[BoundaryPayload]:
        """
        Derive the boundary payload from the current field temperatures.

        Args:
            temperatures: (rows * cols, ) field temperatures in row-major order.
            snapshot: Entities of this tick.
            exterior_temp: Temperature injected through open doors/windows.

        Returns:
            The payload, or None when the house footprint is not inside the field.
        """
        region = self.region
        if not region.is_valid:
            return None

        w, h = region.width, region.height
        padded = np.zeros((w + 2, h + 2), dtype=np.float64)

        # Field is (rows, cols) = (z, x); the payload is indexed [x, z]
        grid = np.asarray(temperatures, dtype=np.float64).reshape(self.geometry.rows, self.geometry.cols)
        padded[1:w + 1, 1:h + 1] = grid[region.start_j:region.end_j + 1, region.start_i:region.end_i + 1].T

        self._apply_neumann_padding(padded)

        for opening in snapshot.openings:
            self._apply_opening(padded, opening, exterior_temp)

        constraints = np.zeros((w + 2, h + 2), dtype=np.uint8)
        constraints[0, :] = 1
        constraints[w + 1, :] = 1
        constraints[:, 0] = 1
        constraints[:, h + 1] = 1

        self._apply_climate_units(padded, constraints, snapshot.heaters, self.climate.heater)
        self._apply_climate_units(padded, constraints, snapshot.air_conditioners, self.climate.air_conditioner)

        return BoundaryPayload(temperatures=padded, constraints=constraints, region=region)

    @staticmethod
    def _apply_neumann_padding(padded: npt.NDArray[np.float64]) -> None:
        """Zero-flux ring: every border cell copies its nearest interior cell."""
        w, h = padded.shape[0] - 2, padded.shape[1] - 2

        padded[1:w + 1, 0] = padded[1:w + 1, 1]
        padded[1:w + 1, h + 1] = padded[1:w + 1, h]
        padded[0, 1:h + 1] = padded[1, 1:h + 1]
        padded[w + 1, 1:h + 1] = padded[w, 1:h + 1]

        # Corners take the diagonal interior neighbour
        padded[0, 0] = padded[1, 1]
        padded[w + 1, 0] = padded[w, 1]
        padded[0, h + 1] = padded[1, h]
        padded[w + 1, h + 1] = padded[w, h]

    def _apply_opening(self, padded: npt.NDArray[np.float64], opening: Entity, exterior_temp: float) -> None:
        """Dirichlet injection along the wall segment of an open door/window."""
        if not opening.is_active:
            return

        region = self.region
        w, h = region.width, region.height
        half = opening.width / 2
        pos = opening.position

        if opening.direction.runs_along_x:
            lo, hi = index_range(pos.x - half, pos.x + half, region.origin_x, self.geometry.density, w)
            z_index = 0 if opening.direction == Direction.NORTH else h + 1
            if lo <= hi:
                padded[lo + 1:hi + 2, z_index] = exterior_temp
        else:
            lo, hi = index_range(pos.z - half, pos.z + half, region.origin_z, self.geometry.density, h)
            x_index = 0 if opening.direction == Direction.WEST else w + 1
            if lo <= hi:
                padded[x_index, lo + 1:hi + 2] = exterior_temp

    def footprint_slices(self, unit: Entity) -> Optional[Tuple[slice, slice]]:
        """
        Padded-matrix slices covered by a climate unit, or None if it is
        entirely outside the interior.
        """
        region = self.region
        density = self.geometry.density
        extent_x, extent_z = unit.footprint()
        pos = unit.position

        lo_x, hi_x = index_range(pos.x - extent_x / 2, pos.x + extent_x / 2, region.origin_x, density, region.width)
        lo_z, hi_z = index_range(pos.z - extent_z / 2, pos.z + extent_z / 2, region.origin_z, density, region.height)
        if lo_x > hi_x or lo_z > hi_z:
            return None
        return slice(lo_x + 1, hi_x + 2), slice(lo_z + 1, hi_z + 2)

    def _apply_climate_units(
        self,
        padded: npt.NDArray[np.float64],
        constraints: npt.NDArray[np.uint8],
        units: Iterable[Entity],
        set_point: float
    ) -> None:
        for unit in units:
            if not unit.is_active:
                continue
            cells = self.footprint_slices(unit)
            if cells is None:
                continue
            padded[cells] = set_point
            constraints[cells] = 1
