"""Tests for configuration defaults and validation"""

import logging

import pytest

from thermalhouse.config import CLIMATE_TEMPERATURES, COLOR_SCALE, HOUSE_CONFIG, HouseConfig, SimulationConfig
from thermalhouse.logging_config import setup_logging


def test_house_inner_half():
    assert HOUSE_CONFIG.inner_half == pytest.approx(5.5)
    assert HouseConfig(size=4.0, wall_thickness=0.25).inner_half == pytest.approx(2.25)


def test_round_trip():
    config = SimulationConfig(alpha=0.05, iterations_per_tick=10, house=HouseConfig(size=8.0))
    assert SimulationConfig.from_dict(config.to_dict()) == config


def test_from_dict_uses_defaults():
    assert SimulationConfig.from_dict({}) == SimulationConfig()


def test_nested_defaults_are_the_module_constants():
    config = SimulationConfig()
    assert config.house is HOUSE_CONFIG
    assert config.climate is CLIMATE_TEMPERATURES
    assert config.color_scale is COLOR_SCALE
    assert (config.climate.heater, config.climate.air_conditioner) == (25.0, 16.0)


@pytest.mark.parametrize("data", [
    {"alpha": 0.0},
    {"alpha": float("inf")},
    {"iterations_per_tick": 0},
    {"max_sub_steps": 0},
    {"house": {"size": -1.0}},
    {"color_scale": {"min_temperature": 10.0, "max_temperature": 10.0}},
])
def test_invalid_values_rejected(data):
    with pytest.raises(ValueError):
        SimulationConfig.from_dict(data)


def test_setup_logging_is_idempotent(tmp_path):
    log_file = tmp_path / "sim.log"
    setup_logging(level=logging.DEBUG, log_file=str(log_file))
    logger = setup_logging(level=logging.DEBUG, log_file=str(log_file))
    assert len(logger.handlers) == 2
    logging.getLogger("thermalhouse.test").debug("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
    # Leave the package logger clean for other tests
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_setup_logging_accepts_level_names():
    logger = setup_logging(level="warning")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    with pytest.raises(ValueError):
        setup_logging(level="loud")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
