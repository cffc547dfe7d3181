import matplotlib
import pytest

from thermalhouse.simulation.field import ThermalField

# Plots in tests must never open a window
matplotlib.use("Agg")


@pytest.fixture
def field() -> ThermalField:
    """20 x 20 m terrain at 0.5 m spacing, default house (inner half 5.5 m)."""
    return ThermalField(-10.0, 10.0, -10.0, 10.0, density=2.0)
