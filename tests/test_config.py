from __future__ import annotations

import math

import pytest

from epicycles.config import (
    DEG_TO_RAD,
    PRESETS,
    ConfigurationError,
    EpicycleConfig,
    ValueRange,
    as_range,
    config_from_mapping,
    preset,
)


def test_default_config_matches_canvas_preset() -> None:
    """The default config is the canvas preset."""
    config = EpicycleConfig()
    assert config == preset("canvas")
    assert config.count_range == ValueRange(5, 40)
    assert config.magnitude_range == ValueRange(50.0, 150.0)
    assert config.rotation_factor_range == ValueRange(0.5, 4.0)
    assert config.cycle_length_ms == 20000.0
    assert config.progress_end == 1.0


def test_accelerated_preset_ranges() -> None:
    config = PRESETS["accelerated"]
    assert config.magnitude_range.as_list() == [50.0, 60.0]
    assert config.rotation_factor_range.as_list() == [0.5, 10.5]


def test_degree_to_radian_factor() -> None:
    assert DEG_TO_RAD == pytest.approx(0.01745329252)
    assert 180 * DEG_TO_RAD == pytest.approx(math.pi)


def test_unknown_preset_raises() -> None:
    with pytest.raises(ConfigurationError, match="unknown preset"):
        preset("vector")


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"count_range": (10, 5)}, "empty range"),
        ({"count_range": (0, 5)}, "at least one"),
        ({"count_range": (2.5, 5)}, "integers"),
        ({"magnitude_range": (-1.0, 5.0)}, "magnitude_range"),
        ({"rotation_factor_range": (0.0, 1.0)}, "rotation_factor_range"),
        ({"magnitude_range": (1.0, math.inf)}, "finite"),
        ({"magnitude_range": (math.nan, 1.0)}, "finite"),
        ({"cycle_length_ms": 0}, "cycle_length_ms"),
        ({"progress_end": -1.0}, "progress_end"),
        ({"frame_interval_ms": -5}, "frame_interval_ms"),
        ({"frame_interval_ms": math.inf}, "frame_interval_ms"),
        ({"frame_interval_ms": math.nan}, "frame_interval_ms"),
        ({"seed": "abc"}, "seed"),
    ],
)
def test_invalid_config_fails_fast(kwargs, message) -> None:
    """Invalid ranges are rejected when the config is built."""
    with pytest.raises(ConfigurationError, match=message):
        EpicycleConfig(**kwargs)


def test_configuration_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        ValueRange(3, 1)


def test_tuple_ranges_are_coerced() -> None:
    config = EpicycleConfig(count_range=(3.0, 7.0), magnitude_range=[10, 20])
    assert config.count_range == ValueRange(3, 7)
    assert isinstance(config.count_range.minimum, int)
    assert config.magnitude_range == ValueRange(10, 20)


def test_as_range_rejects_non_pairs() -> None:
    with pytest.raises(ConfigurationError):
        as_range((1, 2, 3))
    with pytest.raises(ConfigurationError):
        as_range("12")


def test_value_range_helpers() -> None:
    rng = ValueRange(0.5, 4.0)
    assert rng.span == pytest.approx(3.5)
    assert rng.contains(0.5)
    assert rng.contains(4.0)
    assert not rng.contains(4.01)


def test_config_from_mapping_merges_over_base() -> None:
    base = preset("canvas")
    config = config_from_mapping({"countRange": [2, 3], "seed": 7, "unknown": 1}, base=base)
    assert config.count_range == ValueRange(2, 3)
    assert config.seed == 7
    assert config.magnitude_range == base.magnitude_range


def test_config_from_mapping_selects_preset() -> None:
    config = config_from_mapping({"preset": "accelerated", "frameIntervalMs": 33})
    assert config.rotation_factor_range == PRESETS["accelerated"].rotation_factor_range
    assert config.frame_interval_ms == 33


def test_config_from_mapping_validates() -> None:
    with pytest.raises(ConfigurationError, match="magnitude_range"):
        config_from_mapping({"magnitudeRange": [5, 1]})


def test_config_from_mapping_without_payload_returns_base() -> None:
    base = preset("accelerated")
    assert config_from_mapping(None, base=base) is base
    assert config_from_mapping({}, base=base) is base


def test_payload_round_trip() -> None:
    config = EpicycleConfig(seed=3, cycle_length_ms=1000.0)
    assert config_from_mapping(config.to_payload()) == config
