"""Tests for the temperature colour scale"""

import colorsys

import numpy as np
import pytest

from thermalhouse.model.color import COLD_HUE, Color, temperature_to_color, temperatures_to_rgb


@pytest.mark.parametrize("temperature, hue", [
    (-10.0, COLD_HUE),
    (45.0, 0.0),
    (17.5, COLD_HUE / 2),
    (-40.0, COLD_HUE),   # clamped
    (120.0, 0.0),        # clamped
])
def test_hue_ramp(temperature, hue):
    color = temperature_to_color(temperature)
    assert color.h == pytest.approx(hue)
    assert color.s == 1.0
    assert color.l == 0.5


def test_custom_range():
    assert temperature_to_color(0.0, min_temp=0.0, max_temp=10.0).h == pytest.approx(COLD_HUE)
    assert temperature_to_color(10.0, min_temp=0.0, max_temp=10.0).h == pytest.approx(0.0)


def test_nan_maps_to_cold_end():
    assert temperature_to_color(float("nan")).h == pytest.approx(COLD_HUE)
    rgb = temperatures_to_rgb(np.array([np.nan]))
    np.testing.assert_allclose(rgb[0], temperature_to_color(-10.0).to_rgb())


def test_rgb_endpoints():
    assert temperature_to_color(45.0).to_rgb() == pytest.approx((1.0, 0.0, 0.0))
    r, g, b = temperature_to_color(-10.0).to_rgb()
    assert b == pytest.approx(1.0)
    assert r == pytest.approx(0.0)


def test_vectorized_matches_scalar():
    temps = np.linspace(-25.0, 60.0, 97)
    rgb = temperatures_to_rgb(temps)
    assert rgb.shape == (97, 3)
    expected = np.array([temperature_to_color(t).to_rgb() for t in temps])
    np.testing.assert_allclose(rgb, expected, atol=1e-12)


def test_color_to_rgb_uses_hsl():
    color = Color(h=0.3, s=0.8, l=0.4)
    assert color.to_rgb() == pytest.approx(colorsys.hls_to_rgb(0.3, 0.4, 0.8))
