from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from thermalhouse.simulation.field import ThermalField


def plot_field(field: ThermalField, ax: Optional[Axes] = None, show: bool = True) -> Axes:
    """
    Plot the current temperature field as a heatmap with the house outline.

    Args:
        field: The field to plot.
        ax: Axes to draw into; a new figure is created when omitted.
        show: Call plt.show() at the end.

    Returns:
        The axes drawn into.
    """
    scale = field.config.color_scale
    half_step = field.step / 2

    if ax is None:
        plt.rcParams["figure.constrained_layout.use"] = True
        fig = plt.figure(figsize=(7, 6))
        ax = fig.add_subplot()

    image = ax.imshow(
        field.temperature_grid(),
        origin="lower",
        extent=(field.min_x - half_step, field.max_x + half_step, field.min_z - half_step, field.max_z + half_step),
        cmap="jet",
        vmin=scale.min_temperature,
        vmax=scale.max_temperature,
        interpolation="nearest",
    )
    ax.figure.colorbar(image, ax=ax, label="Temperature (°C)")

    inner_half = field.config.house.inner_half
    ax.add_patch(Rectangle(
        (-inner_half, -inner_half), 2 * inner_half, 2 * inner_half,
        fill=False, edgecolor="black", lw=1.5,
    ))

    ax.set_title("Thermal field")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("z (m)")

    if show:
        plt.show()
    return ax
