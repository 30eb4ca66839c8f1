"""Rotating arms and the randomised set they are drawn from."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, overload

from .config import DEG_TO_RAD, ConfigurationError, RangeLike, as_range

__all__ = ["Component", "ComponentSet", "Vector2Polar"]


@dataclass(slots=True)
class Vector2Polar:
    """A rotating arm. ``angle_degrees`` is unbounded and never wrapped."""

    magnitude: float
    angle_degrees: float = 0.0

    def to_cartesian(self) -> Tuple[float, float]:
        theta = self.angle_degrees * DEG_TO_RAD
        return self.magnitude * math.cos(theta), self.magnitude * math.sin(theta)


@dataclass(slots=True)
class Component:
    vector: Vector2Polar
    rotation_factor: float

    @property
    def magnitude(self) -> float:
        return self.vector.magnitude

    @property
    def angle_degrees(self) -> float:
        return self.vector.angle_degrees


class ComponentSet(Sequence[Component]):
    """Ordered, fixed-for-the-run collection of arms.

    The order is the summation order of the chain.  Membership only changes
    through :meth:`regenerate`; the simulator owns the angles.
    """

    def __init__(self, components: Optional[Iterable[Component]] = None) -> None:
        self._components: List[Component] = list(components or ())
        self._rng = random.Random()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, float]]) -> "ComponentSet":
        """Build a set from ``(magnitude, rotation_factor)`` pairs."""

        components = []
        for magnitude, rotation_factor in pairs:
            if not (math.isfinite(magnitude) and math.isfinite(rotation_factor)):
                raise ConfigurationError(
                    f"magnitude and rotation factor must be finite, got ({magnitude!r}, {rotation_factor!r})"
                )
            if magnitude <= 0 or rotation_factor <= 0:
                raise ConfigurationError(
                    f"magnitude and rotation factor must be positive, got ({magnitude!r}, {rotation_factor!r})"
                )
            components.append(Component(Vector2Polar(float(magnitude)), float(rotation_factor)))
        return cls(components)

    def regenerate(
        self,
        count_range: RangeLike,
        magnitude_range: RangeLike,
        rotation_factor_range: RangeLike,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Replace every arm with freshly drawn ones.

        ``rng`` is the random source; pass a seeded ``random.Random`` for
        reproducible sets.  Without one the set falls back to its own private
        generator.
        """

        count = as_range(count_range, "count_range")
        magnitude = as_range(magnitude_range, "magnitude_range")
        rotation = as_range(rotation_factor_range, "rotation_factor_range")
        if count.minimum < 1 or int(count.minimum) != count.minimum or int(count.maximum) != count.maximum:
            raise ConfigurationError(f"count_range must hold positive integers, got {count.as_list()!r}")
        if magnitude.minimum <= 0 or rotation.minimum <= 0:
            raise ConfigurationError("magnitude_range and rotation_factor_range must be strictly positive")

        source = rng if rng is not None else self._rng
        amount = source.randint(int(count.minimum), int(count.maximum))
        self._components = [
            Component(
                Vector2Polar(source.uniform(magnitude.minimum, magnitude.maximum)),
                source.uniform(rotation.minimum, rotation.maximum),
            )
            for _ in range(amount)
        ]

    @overload
    def __getitem__(self, index: int) -> Component: ...

    @overload
    def __getitem__(self, index: slice) -> List[Component]: ...

    def __getitem__(self, index):
        return self._components[index]

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __repr__(self) -> str:
        return f"ComponentSet({len(self._components)} components)"
