from __future__ import annotations

import math
import random

import pytest

from epicycles.components import Component, ComponentSet, Vector2Polar
from epicycles.config import ConfigurationError, ValueRange


def test_regenerate_respects_bounds() -> None:
    """Count, magnitudes and rotation factors stay inside the configured ranges."""
    components = ComponentSet()
    rng = random.Random(1234)
    for _ in range(50):
        components.regenerate((5, 40), (50.0, 150.0), (0.5, 4.0), rng=rng)
        assert 5 <= len(components) <= 40
        for component in components:
            assert 50.0 <= component.magnitude <= 150.0
            assert 0.5 <= component.rotation_factor <= 4.0
            assert component.angle_degrees == 0.0


def test_regenerate_count_is_inclusive() -> None:
    components = ComponentSet()
    rng = random.Random(7)
    seen = set()
    for _ in range(200):
        components.regenerate(ValueRange(1, 3), ValueRange(1.0, 2.0), ValueRange(1.0, 2.0), rng=rng)
        seen.add(len(components))
    assert seen == {1, 2, 3}


def test_regenerate_is_reproducible_with_seed() -> None:
    first = ComponentSet()
    second = ComponentSet()
    first.regenerate((5, 40), (50, 60), (0.5, 10.5), rng=random.Random(42))
    second.regenerate((5, 40), (50, 60), (0.5, 10.5), rng=random.Random(42))
    assert [(c.magnitude, c.rotation_factor) for c in first] == [
        (c.magnitude, c.rotation_factor) for c in second
    ]


def test_regenerate_replaces_previous_components() -> None:
    components = ComponentSet.from_pairs([(10.0, 1.0)] * 50)
    components.regenerate((2, 2), (1.0, 1.0), (3.0, 3.0), rng=random.Random(0))
    assert len(components) == 2
    assert all(c.magnitude == 1.0 and c.rotation_factor == 3.0 for c in components)


def test_regenerate_does_not_touch_global_random_state() -> None:
    random.seed(99)
    expected = random.random()
    random.seed(99)
    ComponentSet().regenerate((5, 10), (1.0, 2.0), (1.0, 2.0))
    assert random.random() == expected


@pytest.mark.parametrize(
    "ranges",
    [
        ((10, 5), (1.0, 2.0), (1.0, 2.0)),
        ((0, 5), (1.0, 2.0), (1.0, 2.0)),
        ((1, 5), (0.0, 2.0), (1.0, 2.0)),
        ((1, 5), (1.0, 2.0), (-1.0, 2.0)),
        ((1, 5), (3.0, 2.0), (1.0, 2.0)),
    ],
)
def test_regenerate_rejects_invalid_ranges(ranges) -> None:
    with pytest.raises(ConfigurationError):
        ComponentSet().regenerate(*ranges, rng=random.Random(0))


def test_from_pairs_keeps_order() -> None:
    components = ComponentSet.from_pairs([(10.0, 1.0), (20.0, 2.0)])
    assert len(components) == 2
    assert components[0].magnitude == 10.0
    assert components[1].rotation_factor == 2.0
    assert [c.magnitude for c in components[0:2]] == [10.0, 20.0]


def test_from_pairs_rejects_non_positive_values() -> None:
    with pytest.raises(ConfigurationError):
        ComponentSet.from_pairs([(0.0, 1.0)])


@pytest.mark.parametrize("pair", [(math.nan, 1.0), (1.0, math.nan), (math.inf, 1.0), (10.0, math.inf)])
def test_from_pairs_rejects_non_finite_values(pair) -> None:
    with pytest.raises(ConfigurationError, match="finite"):
        ComponentSet.from_pairs([pair])


def test_vector_to_cartesian_counter_clockwise() -> None:
    assert Vector2Polar(100.0, 0.0).to_cartesian() == pytest.approx((100.0, 0.0))
    x, y = Vector2Polar(100.0, 90.0).to_cartesian()
    assert x == pytest.approx(0.0, abs=1e-9)
    assert y == pytest.approx(100.0)
    x, y = Vector2Polar(1.0, 720.0 + 180.0).to_cartesian()
    assert x == pytest.approx(-1.0)
    assert y == pytest.approx(0.0, abs=1e-9)


def test_component_exposes_vector_fields() -> None:
    component = Component(Vector2Polar(5.0, 30.0), 2.0)
    assert component.magnitude == 5.0
    assert component.angle_degrees == 30.0
