"""Qt renderer painting the geometry produced by :class:`EpicycleSimulator`.

The widget owns a simulator and an :class:`AnimationClock`.  A ``QTimer``
samples the clock at the configured frame interval, advances the simulator and
schedules a repaint; the paint handler only reads the latest
:class:`RenderGeometry`.

Two backends share the same behaviour through :class:`_ViewWidgetBase`: an
OpenGL-backed widget when the system can create a GL context and a plain raster
``QWidget`` otherwise.  :func:`EpicycleViewWidget` picks one.
"""

from __future__ import annotations

import os
import sys
from typing import Mapping, Optional, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

from ..clock import AnimationClock, now_ms
from ..config import EpicycleConfig, config_from_mapping, preset
from ..simulator import EpicycleSimulator, RenderGeometry

__all__ = ["EpicycleViewWidget"]

BACKGROUND_COLOR = QtGui.QColor("black")
TRACE_COLOR = QtGui.QColor(255, 140, 0)  # dark orange
VECTOR_COLOR = QtGui.QColor(255, 255, 255)
CIRCLE_COLOR = QtGui.QColor(255, 255, 255, 0x66)

TRACE_WIDTH = 10.0
VECTOR_WIDTH = 4.0
CIRCLE_WIDTH = 2.0


def _make_pen(color: QtGui.QColor, width: float) -> QtGui.QPen:
    pen = QtGui.QPen(color, width)
    pen.setCapStyle(QtCore.Qt.RoundCap)
    pen.setJoinStyle(QtCore.Qt.RoundJoin)
    return pen


# ---------------------------------------------------------------------------
# OpenGL helpers


def _create_opengl_functions() -> Tuple[Optional[object], Optional[BaseException]]:
    """Safely instantiate ``QOpenGLFunctions`` when available.

    Returns ``(functions, error)``; ``functions`` is ``None`` when the binding
    is missing or fails to initialise, and ``error`` then holds the cause.
    """

    factory = getattr(QtGui, "QOpenGLFunctions", None)
    if factory is None:
        return None, AttributeError("PyQt5.QtGui has no attribute 'QOpenGLFunctions'")
    try:
        functions = factory()
    except Exception as exc:  # pragma: no cover - depends on bindings
        return None, exc
    try:
        functions.initializeOpenGLFunctions()
    except Exception as exc:  # pragma: no cover - depends on runtime GL state
        return None, exc
    return functions, None


# ---------------------------------------------------------------------------
# Widgets


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends."""

    def _init_view_widget(self, config: Optional[EpicycleConfig]) -> None:
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setAutoFillBackground(False)
        cfg = config if config is not None else preset()
        self.simulator = EpicycleSimulator(cfg)
        self.clock = AnimationClock(cfg.cycle_length_ms, cfg.progress_end)
        self._geometry = self.simulator.geometry
        self._timer = QtCore.QTimer(self)
        self._frame_interval_ms = cfg.frame_interval_ms
        self._timer.timeout.connect(self.step_frame)
        self.start()

    # ------------------------------------------------------------------ animation
    def _apply_frame_interval(self, interval_ms: int) -> None:
        """Update the refresh interval used by the frame timer."""

        interval_ms = max(int(interval_ms), 0)
        self._frame_interval_ms = interval_ms
        if interval_ms <= 0:
            if self._timer.isActive():
                self._timer.stop()
            return
        if self._timer.isActive():
            self._timer.setInterval(interval_ms)
        elif self.simulator.is_running:
            self._timer.start(interval_ms)

    def start(self) -> None:
        self.simulator.start()
        self.clock.start()
        if self._frame_interval_ms > 0:
            self._timer.start(self._frame_interval_ms)

    def stop(self) -> None:
        self._timer.stop()
        self.clock.stop()
        self.simulator.stop()

    def anew(self) -> None:
        """Discard the trace, draw a new set of arms and restart the cycle."""

        self._timer.stop()
        self.simulator.reset()
        self._geometry = self.simulator.geometry
        self.clock.start()
        if self._frame_interval_ms > 0:
            self._timer.start(self._frame_interval_ms)
        self.update()

    def step_frame(self, at_ms: Optional[float] = None) -> RenderGeometry:
        """Advance one frame using the clock; ``at_ms`` overrides the current time."""

        progress, finished = self.clock.sample(now_ms() if at_ms is None else at_ms)
        self._geometry = self.simulator.advance(progress)
        if finished:
            self.simulator.finish_cycle()
            self._geometry = self.simulator.geometry
        self.update()
        return self._geometry

    @property
    def geometry_snapshot(self) -> RenderGeometry:
        return self._geometry

    # ------------------------------------------------------------------ API
    def set_params(self, payload: Mapping[str, object]) -> None:
        """Apply a host payload (see :func:`config_from_mapping`) and restart."""

        config = config_from_mapping(payload, base=self.simulator.config)
        self.clock = AnimationClock(config.cycle_length_ms, config.progress_end)
        self.simulator.configure(config)
        self._geometry = self.simulator.geometry
        self.clock.start()
        self._apply_frame_interval(config.frame_interval_ms)
        self.update()

    # ------------------------------------------------------------------ rendering
    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)
        painter.translate(self.width() / 2.0, self.height() / 2.0)
        geometry = self._geometry

        painter.setBrush(QtCore.Qt.NoBrush)
        painter.setPen(_make_pen(CIRCLE_COLOR, CIRCLE_WIDTH))
        for circle in geometry.circle_path:
            painter.drawEllipse(
                QtCore.QPointF(circle.center.x, circle.center.y), circle.radius, circle.radius
            )

        if geometry.vector_path:
            chain = QtGui.QPolygonF([QtCore.QPointF(0.0, 0.0)])
            for point in geometry.vector_path:
                chain.append(QtCore.QPointF(point.x, point.y))
            painter.setPen(_make_pen(VECTOR_COLOR, VECTOR_WIDTH))
            painter.drawPolyline(chain)

        if len(geometry.trace_path) > 1:
            trace = QtGui.QPolygonF([QtCore.QPointF(p.x, p.y) for p in geometry.trace_path])
            painter.setPen(_make_pen(TRACE_COLOR, TRACE_WIDTH))
            painter.drawPolyline(trace)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None, config: Optional[EpicycleConfig] = None) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._gl: Optional[object] = None
        self._init_view_widget(config)

    def initializeGL(self) -> None:  # pragma: no cover - requires GUI context
        self._gl, error = _create_opengl_functions()
        if error is not None:  # pragma: no cover - depends on bindings/runtime
            print(
                f"[Epicycles][WARN] OpenGL initialisation failed: {error}. Falling back to painter clears.",
                file=sys.stderr,
            )
        if self._gl is not None:
            self._gl.glClearColor(0.0, 0.0, 0.0, 1.0)

    def resizeGL(self, width: int, height: int) -> None:  # pragma: no cover - requires GUI context
        # The painter handles the viewport.
        del width, height

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        if self._gl is not None:
            # GL_COLOR_BUFFER_BIT
            self._gl.glClear(0x00004000)
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None, config: Optional[EpicycleConfig] = None) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(config)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True

    env_backend = os.environ.get("EPICYCLES_FORCE_BACKEND", "").strip().lower()
    if env_backend == "raster":
        return False
    if env_backend == "opengl":
        return True
    return hasattr(QtWidgets, "QOpenGLWidget")


def EpicycleViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
    config: Optional[EpicycleConfig] = None,
) -> QtWidgets.QWidget:
    """Factory returning the best available renderer widget.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    force_backend:
        ``"opengl"`` forces the OpenGL widget while ``"raster"`` selects the
        plain QWidget implementation.  ``EPICYCLES_FORCE_BACKEND`` applies when
        this is ``None``.
    config:
        Simulation configuration; defaults to the ``canvas`` preset.

    Returns
    -------
    QtWidgets.QWidget
        A widget exposing the same public API regardless of the backend choice.
    """

    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(parent, config)
            setattr(widget, "backend_name", "opengl")
            setattr(widget, "uses_opengl", True)
            return widget
        except Exception as exc:
            print(
                f"[Epicycles][WARN] Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.",
                file=sys.stderr,
            )
    widget = _RasterViewWidget(parent, config)
    setattr(widget, "backend_name", "raster")
    setattr(widget, "uses_opengl", False)
    return widget
