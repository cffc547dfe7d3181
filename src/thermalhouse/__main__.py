"""Headless demo: an open door and a running heater in the default scene."""
import logging

from thermalhouse.logging_config import setup_logging
from thermalhouse.model.entities import Direction, Door, Heater, Position
from thermalhouse.post.plot import plot_field
from thermalhouse.simulation.field import ThermalField

logger = logging.getLogger("thermalhouse.demo")


def main(ticks: int = 600, delta_time: float = 1 / 60) -> ThermalField:
    setup_logging(level=logging.INFO)

    # 20 x 20 m terrain, 0.5 m spacing
    field = ThermalField(-10.0, 10.0, -10.0, 10.0, density=2.0)

    door = Door(Position(0.0, -5.5), direction=Direction.NORTH, is_active=True, id="front-door")
    heater = Heater(Position(2.0, 2.0), is_active=True, id="heater-1")

    for tick in range(ticks):
        metrics = field.update(delta_time, 30.0, -10.0, doors=[door], heaters=[heater])
        if tick % 100 == 0:
            logger.info(
                f"Tick {tick}: interior mean {metrics.interior_mean:.2f} °C "
                f"(min {metrics.interior_min:.2f}, max {metrics.interior_max:.2f}), "
                f"r = {metrics.diffusion_number:.5f}"
            )

    plot_field(field)
    return field


if __name__ == "__main__":
    main()
