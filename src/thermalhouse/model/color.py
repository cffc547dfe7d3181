"""
Temperature Colour Scale
========================
Maps temperatures onto the blue (cold) -> red (hot) HSL ramp that the renderer
applies to every grid point.
"""
from __future__ import annotations

import colorsys
from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

import numpy as np

from thermalhouse.config import COLOR_SCALE
from thermalhouse.utils import clamp, hsl_to_rgb

if TYPE_CHECKING:
    import numpy.typing as npt

# Hue of the coldest colour (blue); the hottest is 0.0 (red)
COLD_HUE = 0.66
SATURATION = 1.0
LIGHTNESS = 0.5


@dataclass(frozen=True)
class Color:
    h: float
    s: float = SATURATION
    l: float = LIGHTNESS

    def to_rgb(self) -> tuple[float, float, float]:
        return colorsys.hls_to_rgb(self.h, self.l, self.s)


def temperature_to_color(
    temperature: float,
    min_temp: float = COLOR_SCALE.min_temperature,
    max_temp: float = COLOR_SCALE.max_temperature
) -> Color:
    """
    Get the display colour of a temperature.

    Args:
        temperature: Temperature in °C.
        min_temp: Temperature drawn fully blue.
        max_temp: Temperature drawn fully red.

    Returns:
        HSL colour; values outside [min_temp, max_temp] saturate at the ends.
    """
    if math.isnan(temperature):
        alpha = 0.0
    else:
        alpha = clamp((temperature - min_temp) / (max_temp - min_temp), 0.0, 1.0)
    return Color(h=COLD_HUE * (1.0 - alpha))


def temperatures_to_rgb(
    temperatures: npt.NDArray[np.float64],
    min_temp: float = COLOR_SCALE.min_temperature,
    max_temp: float = COLOR_SCALE.max_temperature
) -> npt.NDArray[np.float64]:
    """
    Vectorized version of temperature_to_color, returning RGB directly.

    Args:
        temperatures: (N, ) temperatures in °C.

    Returns:
        (N, 3) array of RGB components in [0, 1].
    """
    t = np.asarray(temperatures, dtype=np.float64)
    alpha = np.clip((t - min_temp) / (max_temp - min_temp), 0.0, 1.0)
    alpha = np.nan_to_num(alpha, nan=0.0)
    return hsl_to_rgb(COLD_HUE * (1.0 - alpha), SATURATION, LIGHTNESS)
