"""
Configuration & Global Constants
================================
This module serves as the central registry for the scene and entity constants
that the thermal core consumes.

Why is this file needed?
------------------------
1. Single source: house geometry, entity footprints and climate set-points are
   owned by the hosting application and must agree with what it renders.
2. Tuning: the diffusion parameters used per tick (visual diffusivity, steps
   per tick) live here instead of being scattered through the solver.

Exports:
    HOUSE_CONFIG (HouseConfig): Size and wall thickness of the enclosure.
    DOOR_CONFIG, WINDOW_CONFIG, HEATER_CONFIG, AC_CONFIG (EntityDimensions):
        Footprints per entity kind.
    CLIMATE_TEMPERATURES, COLOR_SCALE: Heater/AC set-points and display range.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
import math
from typing import Dict, Any


@dataclass(frozen=True)
class HouseConfig:
    size: float = 10.0
    wall_thickness: float = 0.5

    @property
    def inner_half(self) -> float:
        """Half-extent of the enclosure footprint, walls included."""
        return self.size / 2 + self.wall_thickness


@dataclass(frozen=True)
class EntityDimensions:
    width: float   # m, along the wall
    depth: float   # m, into the room


@dataclass(frozen=True)
class ClimateTemperatures:
    heater: float = 25.0
    air_conditioner: float = 16.0


@dataclass(frozen=True)
class ColorScale:
    min_temperature: float = -10.0
    max_temperature: float = 45.0


HOUSE_CONFIG = HouseConfig()

DOOR_CONFIG = EntityDimensions(width=1.5, depth=HOUSE_CONFIG.wall_thickness)
WINDOW_CONFIG = EntityDimensions(width=2.0, depth=HOUSE_CONFIG.wall_thickness)
HEATER_CONFIG = EntityDimensions(width=1.0, depth=1.0)
AC_CONFIG = EntityDimensions(width=2.5, depth=0.75)

CLIMATE_TEMPERATURES = ClimateTemperatures()
COLOR_SCALE = ColorScale()


@dataclass
class SimulationConfig:
    """
    Parameters of one simulation session.

    The diffusivity is a visual one: real air (2e-5 m²/s) would show no
    visible change at frame rates.
    """
    alpha: float = 0.01
    iterations_per_tick: int = 1
    initial_exterior: float = 45.0
    initial_interior: float = -10.0
    max_sub_steps: int = 100_000

    house: HouseConfig = HOUSE_CONFIG
    climate: ClimateTemperatures = CLIMATE_TEMPERATURES
    color_scale: ColorScale = COLOR_SCALE

    def validate(self) -> None:
        """Raise ValueError if any parameter would make the solver meaningless."""
        if not math.isfinite(self.alpha) or self.alpha <= 0:
            raise ValueError(f"alpha must be a positive finite number, got {self.alpha}")
        if self.iterations_per_tick < 1:
            raise ValueError(f"iterations_per_tick must be >= 1, got {self.iterations_per_tick}")
        if self.max_sub_steps < 1:
            raise ValueError(f"max_sub_steps must be >= 1, got {self.max_sub_steps}")
        if self.house.size < 0 or self.house.wall_thickness < 0:
            raise ValueError("House size and wall thickness must be non-negative.")
        if self.color_scale.max_temperature <= self.color_scale.min_temperature:
            raise ValueError("Color scale maximum must be above its minimum.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SimulationConfig:
        defaults = SimulationConfig()
        config = SimulationConfig(
            alpha=float(data.get("alpha", defaults.alpha)),
            iterations_per_tick=int(data.get("iterations_per_tick", defaults.iterations_per_tick)),
            initial_exterior=float(data.get("initial_exterior", defaults.initial_exterior)),
            initial_interior=float(data.get("initial_interior", defaults.initial_interior)),
            max_sub_steps=int(data.get("max_sub_steps", defaults.max_sub_steps)),
            house=HouseConfig(**data.get("house", {})),
            climate=ClimateTemperatures(**data.get("climate", {})),
            color_scale=ColorScale(**data.get("color_scale", {})),
        )
        config.validate()
        return config
