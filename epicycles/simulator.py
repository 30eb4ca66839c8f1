"""Epicycle kinematics and path accumulation.

The simulator turns a progress value into one frame of geometry:

* ``vector_path``: cumulative tip of every arm, in chain order;
* ``circle_path``: the circle each arm's tip sweeps around the previous tip;
* ``trace_path``: the final tip recorded once per frame since the cycle began.

Angles are recomputed from progress on every call rather than integrated, so
replaying a progress value gives the same chain and long runs do not drift.
Nothing here imports Qt; the renderer only reads :class:`RenderGeometry`.
"""

from __future__ import annotations

import enum
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .components import Component, ComponentSet
from .config import EpicycleConfig, preset

__all__ = [
    "Circle",
    "EpicycleSimulator",
    "Point2D",
    "RenderGeometry",
    "SimulatorState",
    "compute_chain",
    "split_progress",
]


@dataclass(frozen=True, slots=True)
class Point2D:
    x: float
    y: float


ORIGIN = Point2D(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Circle:
    center: Point2D
    radius: float


@dataclass(frozen=True, slots=True)
class RenderGeometry:
    """Read-only frame handed to the renderer."""

    vector_path: Tuple[Point2D, ...] = ()
    circle_path: Tuple[Circle, ...] = ()
    trace_path: Tuple[Point2D, ...] = ()

    @property
    def tip(self) -> Point2D:
        return self.vector_path[-1] if self.vector_path else ORIGIN


class SimulatorState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    CYCLE_BOUNDARY = "cycle_boundary"


def split_progress(progress: float, progress_end: float) -> Tuple[int, float]:
    """Return ``(cycle_index, normalized)`` for ``progress``.

    ``normalized`` lies in ``[0, 1]``.  An exact multiple of ``progress_end``
    closes the cycle it ends (normalized ``1.0``) instead of opening the next.
    """

    ratio = progress / progress_end
    cycle = math.floor(ratio)
    normalized = ratio - cycle
    if normalized == 0.0 and cycle > 0:
        cycle -= 1
        normalized = 1.0
    return int(cycle), normalized


def compute_chain(components: Iterable[Component]) -> Tuple[Tuple[Point2D, ...], Tuple[Circle, ...]]:
    """Walk the arms from the origin and return the tips and their circles."""

    vectors: List[Point2D] = []
    circles: List[Circle] = []
    x = 0.0
    y = 0.0
    for component in components:
        dx, dy = component.vector.to_cartesian()
        center = Point2D(x, y)
        x += dx
        y += dy
        vectors.append(Point2D(x, y))
        circles.append(Circle(center, math.hypot(x - center.x, y - center.y)))
    return tuple(vectors), tuple(circles)


class EpicycleSimulator:
    """Maps progress values to render geometry and manages the trace per cycle.

    The host drives it: ``start()``, then ``advance(progress)`` once per frame,
    ``finish_cycle()`` when its animation reports the end of a cycle, and
    ``reset()`` to draw a new set of arms.  Calls must come from a single
    thread, one at a time.
    """

    def __init__(
        self,
        config: Optional[EpicycleConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        components: Optional[ComponentSet] = None,
    ) -> None:
        self._config = config if config is not None else preset()
        self._rng = rng if rng is not None else random.Random(self._config.seed)
        self._state = SimulatorState.IDLE
        self._cycle: Optional[int] = None
        self._last_progress: Optional[float] = None
        self._trace: List[Point2D] = []
        self._geometry = RenderGeometry()
        if components is not None:
            self._components = components
        else:
            self._components = ComponentSet()
            self._regenerate()

    # ------------------------------------------------------------------ helpers
    def _debug(self, message: str) -> None:
        print(f"[Epicycles][DEBUG] {message}", flush=True)

    def _regenerate(self) -> None:
        cfg = self._config
        self._components.regenerate(
            cfg.count_range,
            cfg.magnitude_range,
            cfg.rotation_factor_range,
            rng=self._rng,
        )
        self._debug(
            "regenerated %d components (magnitude=%s, rotation=%s)"
            % (len(self._components), cfg.magnitude_range.as_list(), cfg.rotation_factor_range.as_list())
        )

    def _clear_paths(self) -> None:
        self._trace.clear()
        self._geometry = RenderGeometry()

    # ------------------------------------------------------------------ properties
    @property
    def config(self) -> EpicycleConfig:
        return self._config

    @property
    def components(self) -> ComponentSet:
        return self._components

    @property
    def state(self) -> SimulatorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not SimulatorState.IDLE

    @property
    def geometry(self) -> RenderGeometry:
        """Latest frame; reflects cycle boundaries and resets immediately."""

        return self._geometry

    # ------------------------------------------------------------------ lifecycle
    def start(self) -> None:
        self._state = SimulatorState.RUNNING
        self._cycle = None
        self._last_progress = None

    def stop(self) -> None:
        self._state = SimulatorState.IDLE

    def reset(self) -> None:
        """Drop the current cycle, draw new arms and start again."""

        self.stop()
        self._clear_paths()
        self._regenerate()
        self.start()

    def configure(self, config: EpicycleConfig) -> None:
        self._config = config
        if config.seed is not None:
            self._rng = random.Random(config.seed)
        self.reset()

    def set_components(self, components: ComponentSet) -> None:
        self._components = components
        self._clear_paths()
        self._cycle = None
        self._last_progress = None

    def finish_cycle(self) -> None:
        """Handle the end of a cycle: the trace starts over.

        A running simulator reports ``CYCLE_BOUNDARY`` until the next
        ``advance`` opens the following cycle.
        """

        if self._state is not SimulatorState.IDLE:
            self._state = SimulatorState.CYCLE_BOUNDARY
        self._trace.clear()
        self._geometry = RenderGeometry(self._geometry.vector_path, self._geometry.circle_path, ())
        self._debug("cycle %s finished" % (self._cycle if self._cycle is not None else "-"))
        # The next advance opens a fresh cycle whatever its progress value.
        self._cycle = None
        self._last_progress = None

    # ------------------------------------------------------------------ frames
    def advance(self, progress: float) -> RenderGeometry:
        """Compute the frame for ``progress`` and append its tip to the trace.

        Non-finite progress has no position in the cycle; the previous frame is
        returned unchanged.
        """

        if not math.isfinite(progress):
            self._debug("ignored non-finite progress %r" % (progress,))
            return self._geometry
        if self._state is SimulatorState.IDLE:
            self.start()

        cycle, normalized = split_progress(progress, self._config.progress_end)
        if self._cycle is not None and (
            cycle != self._cycle or (self._last_progress is not None and progress < self._last_progress)
        ):
            self.finish_cycle()
        self._state = SimulatorState.RUNNING
        self._cycle = cycle
        self._last_progress = progress

        turns = normalized * 360.0
        for component in self._components:
            component.vector.angle_degrees = turns * component.rotation_factor

        vectors, circles = compute_chain(self._components)
        self._trace.append(vectors[-1] if vectors else ORIGIN)
        self._geometry = RenderGeometry(vectors, circles, tuple(self._trace))
        return self._geometry
