# -*- coding: utf-8 -*-
"""Application entry point: a window showing the epicycle animation."""

from __future__ import annotations

import argparse
import io
import sys
from typing import NoReturn, Optional, Sequence


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Unable to start Epicycles: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the required OpenGL libraries are available.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Hint: the system library libGL.so.1 is missing. Install the Mesa/OpenGL packages."
        )
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .config import DEFAULT_PRESET, PRESETS, TOOLTIPS, EpicycleConfig, preset
from .view.view_widget import EpicycleViewWidget

DEBUG_MARKER = "[Epicycles][DEBUG]"


class _DebugSilencer(io.TextIOBase):
    """Stream wrapper filtering the simulator diagnostics."""

    def __init__(self, stream: io.TextIOBase, marker: str) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._buffer: str = ""

    def write(self, text: str) -> int:  # type: ignore[override]
        self._buffer += text
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            self._emit(line + "\n")
        return len(text)

    def flush(self) -> None:  # type: ignore[override]
        if self._buffer:
            self._emit(self._buffer)
            self._buffer = ""
        self._stream.flush()

    def _emit(self, chunk: str) -> None:
        if self._marker not in chunk:
            self._stream.write(chunk)

    def __getattr__(self, name):
        return getattr(self._stream, name)


def _install_debug_silencer(marker: str = DEBUG_MARKER) -> None:
    if marker and not isinstance(sys.stdout, _DebugSilencer):
        sys.stdout = _DebugSilencer(sys.stdout, marker)


class ViewWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        screen: QtGui.QScreen,
        config: EpicycleConfig,
        *,
        force_backend: Optional[str] = None,
    ):
        super().__init__(None)
        self.setWindowTitle("Epicycles")
        self.view = EpicycleViewWidget(self, force_backend=force_backend, config=config)

        self.btn_anew = QtWidgets.QPushButton("Anew")
        self.btn_anew.setCursor(Qt.PointingHandCursor)
        self.btn_anew.setToolTip(TOOLTIPS["anew"])
        self.btn_anew.clicked.connect(self.view.anew)

        w = QtWidgets.QWidget()
        lay = QtWidgets.QVBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(0)
        lay.addWidget(self.view, 1)
        lay.addWidget(self.btn_anew, 0)
        self.setCentralWidget(w)

        self._apply_screen_geometry(screen)
        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)

    def _apply_screen_geometry(self, screen: QtGui.QScreen):
        geometry = screen.availableGeometry()
        side = int(min(geometry.width(), geometry.height()) * 0.8)
        left = geometry.left() + (geometry.width() - side) // 2
        top = geometry.top() + (geometry.height() - side) // 2
        self.setGeometry(left, top, side, side)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.stop()
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Animate a random chain of rotating vectors.")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default=DEFAULT_PRESET,
        help=TOOLTIPS["preset"] + " (default: %(default)s)",
    )
    parser.add_argument(
        "--backend",
        choices=("opengl", "raster"),
        default=None,
        help="force a renderer backend instead of auto-detecting it",
    )
    parser.add_argument("--seed", type=int, default=None, help=TOOLTIPS["seed"])
    parser.add_argument("--debug", action="store_true", help="print simulator diagnostics")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> EpicycleConfig:
    config = preset(args.preset)
    if args.seed is not None:
        config = config.with_changes(seed=args.seed)
    return config


def main(argv: Optional[Sequence[str]] = None, *, headless: bool = False) -> int:
    """Start the application.

    ``headless`` parses the arguments and builds the configuration but returns
    before any ``QApplication`` is created, for import-time checks and tests.
    """

    args = parse_args(argv)
    config = build_config(args)
    if headless:
        return 0
    if not args.debug:
        _install_debug_silencer()

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])
    window = ViewWindow(QtGui.QGuiApplication.primaryScreen(), config, force_backend=args.backend)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
