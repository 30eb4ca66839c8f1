"""Wall-clock driver turning elapsed milliseconds into simulator progress."""

from __future__ import annotations

import time
from typing import Optional, Tuple

__all__ = ["AnimationClock", "now_ms"]


def now_ms() -> float:
    return time.perf_counter() * 1000.0


class AnimationClock:
    """Repeating linear animation from ``0`` to ``progress_end`` over ``length_ms``.

    ``sample`` reports ``finished=True`` exactly once per cycle, on the sample
    where the elapsed time reaches the length; the progress of that sample is
    clamped to ``progress_end``.  With ``repeat`` the next cycle starts at the
    time of that sample.
    """

    def __init__(self, length_ms: float, progress_end: float = 1.0, *, repeat: bool = True) -> None:
        if length_ms <= 0:
            raise ValueError(f"length_ms must be positive, got {length_ms!r}")
        self.length_ms = float(length_ms)
        self.progress_end = float(progress_end)
        self.repeat = repeat
        self._start_ms: Optional[float] = None
        self._done = False

    @property
    def running(self) -> bool:
        return self._start_ms is not None and not self._done

    def start(self, at_ms: Optional[float] = None) -> None:
        self._start_ms = now_ms() if at_ms is None else float(at_ms)
        self._done = False

    def stop(self) -> None:
        self._start_ms = None
        self._done = False

    def sample(self, at_ms: Optional[float] = None) -> Tuple[float, bool]:
        current = now_ms() if at_ms is None else float(at_ms)
        if self._start_ms is None:
            self.start(current)
        if self._done:
            return self.progress_end, False
        elapsed = max(0.0, current - self._start_ms)
        if elapsed >= self.length_ms:
            if self.repeat:
                self._start_ms = current
            else:
                self._done = True
            return self.progress_end, True
        return self.progress_end * (elapsed / self.length_ms), False
