"""Configuration shared by the simulator and the Qt renderer.

Two presets are shipped.  ``canvas`` matches the raster animation (large arms,
slow rotation, 20 s cycles) and ``accelerated`` the GPU variant (short arms
spinning much faster).  Both are validated eagerly so a bad range never
reaches the animation loop.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

__all__ = [
    "ConfigurationError",
    "DEG_TO_RAD",
    "DEFAULT_PRESET",
    "EpicycleConfig",
    "PRESETS",
    "TOOLTIPS",
    "ValueRange",
    "as_range",
    "config_from_mapping",
    "preset",
]

DEG_TO_RAD = math.pi / 180.0
DEFAULT_PRESET = "canvas"


class ConfigurationError(ValueError):
    """Raised when a range or animation constant cannot drive the simulation."""


@dataclass(frozen=True, slots=True)
class ValueRange:
    """Inclusive numeric range ``[minimum, maximum]``."""

    minimum: float
    maximum: float

    def __post_init__(self) -> None:
        for bound in (self.minimum, self.maximum):
            if isinstance(bound, bool) or not isinstance(bound, (int, float)):
                raise ConfigurationError(f"range bounds must be numbers, got {bound!r}")
            if not math.isfinite(bound):
                raise ConfigurationError(f"range bounds must be finite, got {bound!r}")
        if self.minimum > self.maximum:
            raise ConfigurationError(
                f"empty range: minimum {self.minimum!r} is greater than maximum {self.maximum!r}"
            )

    @property
    def span(self) -> float:
        return self.maximum - self.minimum

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def as_list(self) -> list:
        return [self.minimum, self.maximum]


RangeLike = Union[ValueRange, Sequence[float]]


def as_range(value: RangeLike, name: str = "range") -> ValueRange:
    """Return ``value`` as a :class:`ValueRange`, accepting ``(min, max)`` pairs."""

    if isinstance(value, ValueRange):
        return value
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ConfigurationError(f"{name} must be a (min, max) pair, got {value!r}")
    try:
        return ValueRange(value[0], value[1])
    except ConfigurationError as exc:
        raise ConfigurationError(f"{name}: {exc}") from exc


def _require_positive(rng: ValueRange, name: str) -> None:
    if rng.minimum <= 0:
        raise ConfigurationError(f"{name} must be strictly positive, got minimum {rng.minimum!r}")


@dataclass(frozen=True, slots=True)
class EpicycleConfig:
    """Ranges and animation constants used to build and animate the arms.

    Parameters
    ----------
    count_range:
        Inclusive range for the number of arms drawn at each regeneration.
    magnitude_range:
        Range the arm lengths are drawn from.
    rotation_factor_range:
        Range of the per-arm speed multipliers applied to the shared time base.
    cycle_length_ms:
        Duration of one animation cycle for the wall-clock driver.
    progress_end:
        End value of the progress domain; ``advance`` rescales by it.
    frame_interval_ms:
        Refresh interval of the renderer timer. ``0`` pauses the timer.
    seed:
        Optional seed for the random generator owned by the simulator.
    """

    count_range: ValueRange = ValueRange(5, 40)
    magnitude_range: ValueRange = ValueRange(50.0, 150.0)
    rotation_factor_range: ValueRange = ValueRange(0.5, 4.0)
    cycle_length_ms: float = 20000.0
    progress_end: float = 1.0
    frame_interval_ms: int = 16
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce through object.__setattr__.
        for name in ("count_range", "magnitude_range", "rotation_factor_range"):
            object.__setattr__(self, name, as_range(getattr(self, name), name))

        count = self.count_range
        if int(count.minimum) != count.minimum or int(count.maximum) != count.maximum:
            raise ConfigurationError(f"count_range bounds must be integers, got {count.as_list()!r}")
        if count.minimum < 1:
            raise ConfigurationError("count_range must allow at least one component")
        object.__setattr__(self, "count_range", ValueRange(int(count.minimum), int(count.maximum)))

        _require_positive(self.magnitude_range, "magnitude_range")
        _require_positive(self.rotation_factor_range, "rotation_factor_range")

        if not _is_number(self.cycle_length_ms) or not math.isfinite(self.cycle_length_ms) or self.cycle_length_ms <= 0:
            raise ConfigurationError(f"cycle_length_ms must be a positive number, got {self.cycle_length_ms!r}")
        if not _is_number(self.progress_end) or not math.isfinite(self.progress_end) or self.progress_end <= 0:
            raise ConfigurationError(f"progress_end must be a positive number, got {self.progress_end!r}")
        if (
            not _is_number(self.frame_interval_ms)
            or not math.isfinite(self.frame_interval_ms)
            or self.frame_interval_ms < 0
        ):
            raise ConfigurationError(f"frame_interval_ms must be a finite number >= 0, got {self.frame_interval_ms!r}")
        object.__setattr__(self, "frame_interval_ms", int(self.frame_interval_ms))
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer or None, got {self.seed!r}")

    def with_changes(self, **changes: object) -> "EpicycleConfig":
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, object]:
        """Return the JSON style payload understood by :func:`config_from_mapping`."""

        return {
            "countRange": self.count_range.as_list(),
            "magnitudeRange": self.magnitude_range.as_list(),
            "rotationFactorRange": self.rotation_factor_range.as_list(),
            "cycleLengthMs": self.cycle_length_ms,
            "progressEnd": self.progress_end,
            "frameIntervalMs": self.frame_interval_ms,
            "seed": self.seed,
        }


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


PRESETS: Dict[str, EpicycleConfig] = {
    "canvas": EpicycleConfig(),
    "accelerated": EpicycleConfig(
        magnitude_range=ValueRange(50.0, 60.0),
        rotation_factor_range=ValueRange(0.5, 10.5),
        cycle_length_ms=40000.0,
    ),
}


def preset(name: str = DEFAULT_PRESET) -> EpicycleConfig:
    try:
        return PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise ConfigurationError(f"unknown preset {name!r} (expected one of: {known})") from None


_PAYLOAD_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("countRange", "count_range"),
    ("magnitudeRange", "magnitude_range"),
    ("rotationFactorRange", "rotation_factor_range"),
    ("cycleLengthMs", "cycle_length_ms"),
    ("progressEnd", "progress_end"),
    ("frameIntervalMs", "frame_interval_ms"),
    ("seed", "seed"),
)


def config_from_mapping(
    payload: Optional[Mapping[str, object]],
    base: Optional[EpicycleConfig] = None,
) -> EpicycleConfig:
    """Merge a host payload over ``base`` and return a validated config.

    ``preset`` selects the starting point when present.  Unknown keys are
    ignored; invalid values raise :class:`ConfigurationError`.
    """

    if not isinstance(payload, Mapping):
        return base if base is not None else preset()

    if "preset" in payload:
        start = preset(str(payload["preset"]))
    else:
        start = base if base is not None else preset()

    changes: Dict[str, object] = {}
    for key, field_name in _PAYLOAD_FIELDS:
        if key in payload:
            value = payload[key]
            if field_name.endswith("_range"):
                value = as_range(value, field_name)  # type: ignore[arg-type]
            changes[field_name] = value
    if not changes:
        return start
    return replace(start, **changes)


TOOLTIPS = {
    "countRange": "Minimum and maximum number of rotating arms drawn at each reset.",
    "magnitudeRange": "Length range of each arm, in pixels.",
    "rotationFactorRange": "Speed multiplier range; 1 means one full turn per cycle.",
    "cycleLengthMs": "Duration of one animation cycle; the trace is cleared when it ends.",
    "progressEnd": "End value of the progress domain fed to the simulator.",
    "frameIntervalMs": "Refresh interval of the view; 0 pauses the animation.",
    "seed": "Seed of the random generator, for reproducible arm sets.",
    "preset": "Named set of defaults: canvas or accelerated.",
    "anew": "Discard the trace and draw a new random set of arms.",
}
