from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a scalar into [lower, upper]."""
    return max(lower, min(upper, value))


def clamp_index_range(start: int, end: int, size: int) -> tuple[int, int]:
    """Clip an inclusive index range to [0, size - 1]. The result is empty when start > end."""
    return max(0, start), min(size - 1, end)


def hsl_to_rgb(
    h: npt.NDArray[np.float64],
    s: float | npt.NDArray[np.float64],
    l: float | npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """
    Vectorized HSL -> RGB conversion.

    Args:
        h: (N, ) hues in [0, 1].
        s: Saturation(s) in [0, 1].
        l: Lightness(es) in [0, 1].

    Returns:
        (N, 3) array of RGB components in [0, 1].
    """
    h = np.asarray(h, dtype=np.float64)
    s = np.broadcast_to(np.asarray(s, dtype=np.float64), h.shape)
    l = np.broadcast_to(np.asarray(l, dtype=np.float64), h.shape)

    # Same piecewise definition as colorsys.hls_to_rgb
    m2 = np.where(l <= 0.5, l * (1.0 + s), l + s - l * s)
    m1 = 2.0 * l - m2

    def _channel(hue: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        hue = hue % 1.0
        return np.select(
            [hue < 1.0 / 6.0, hue < 0.5, hue < 2.0 / 3.0],
            [m1 + (m2 - m1) * hue * 6.0, m2, m1 + (m2 - m1) * (2.0 / 3.0 - hue) * 6.0],
            default=m1,
        )

    rgb = np.stack((_channel(h + 1.0 / 3.0), _channel(h), _channel(h - 1.0 / 3.0)), axis=-1)
    # Achromatic colours have r = g = b = l
    return np.where((s == 0.0)[..., None], l[..., None], rgb)
