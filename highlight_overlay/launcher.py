from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QCheckBox, QGridLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from highlight_overlay.geometry import Rectangle
from highlight_overlay.highlighter import HighlightState, Highlighter
from highlight_overlay.logging_utils import build_rotating_file_handler, package_logger, resolve_logs_dir
from highlight_overlay.overlay_config import OverlayConfig, load_overlay_config
from highlight_overlay.png_encoder import QtPngEncoder
from highlight_overlay.rasterizer import Rasterizer, RenderStatus

_LOGGER = package_logger()


def parse_rect(value: str) -> Rectangle:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(f"expected LEFT,TOP,WIDTH,HEIGHT, got {value!r}")
    try:
        left, top, width, height = (float(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid rectangle {value!r}: {exc}") from exc
    return Rectangle(left, top, width, height)


def _load_config(path: Optional[str]) -> OverlayConfig:
    if not path:
        return OverlayConfig()
    return load_overlay_config(Path(path).expanduser())


def _install_file_logging(log_dir: Optional[str], level: int) -> None:
    if log_dir is None:
        return
    directory = Path(log_dir).expanduser() if log_dir else resolve_logs_dir()
    handler = build_rotating_file_handler(
        directory,
        "highlight-overlay.log",
        formatter=logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"),
    )
    handler.setLevel(level)
    _LOGGER.addHandler(handler)
    _LOGGER.debug("File logging enabled at %s", directory)


def run_render(args: argparse.Namespace) -> int:
    config: OverlayConfig = args.overlay_config
    rasterizer = Rasterizer(config, QtPngEncoder(), logger=_LOGGER)
    result = rasterizer.render(list(args.rect or []), args.width, args.height)
    if result.status is not RenderStatus.OK or result.image is None:
        _LOGGER.error("Render produced no image (%s)", result.reason)
        return 1
    output = Path(args.output).expanduser()
    output.write_bytes(result.image.data)
    _LOGGER.info("Wrote %dx%d overlay to %s", args.width, args.height, output)
    return 0


def _build_demo_windows(count: int) -> tuple[QWidget, QWidget, List[QPushButton], List[QCheckBox]]:
    # The overlay swallows input on the target window, so toggles live in a separate window.
    targets_window = QWidget()
    targets_window.setWindowTitle("Highlight overlay demo")
    target_layout = QGridLayout(targets_window)
    controls_window = QWidget()
    controls_window.setWindowTitle("Highlight targets")
    control_layout = QVBoxLayout(controls_window)
    control_layout.addWidget(QLabel("Tick a target to highlight it."))
    buttons: List[QPushButton] = []
    toggles: List[QCheckBox] = []
    for position in range(count):
        label = f"Target {position + 1}"
        button = QPushButton(label, targets_window)
        target_layout.addWidget(button, position // 3, position % 3)
        buttons.append(button)
        toggle = QCheckBox(label, controls_window)
        control_layout.addWidget(toggle)
        toggles.append(toggle)
    targets_window.resize(640, 480)
    return targets_window, controls_window, buttons, toggles


def run_demo(args: argparse.Namespace) -> int:
    config: OverlayConfig = args.overlay_config
    app = QApplication.instance() or QApplication(sys.argv)
    targets_window, controls_window, buttons, toggles = _build_demo_windows(6)
    highlighter = Highlighter(config, host=targets_window)

    def _refresh() -> None:
        selected = [button for button, toggle in zip(buttons, toggles) if toggle.isChecked()]
        if not selected:
            highlighter.clear()
            return
        highlighter.init(selected)
        if highlighter.state is HighlightState.HIDDEN:
            highlighter.show_highlight()

    for toggle in toggles:
        toggle.toggled.connect(lambda _checked: _refresh())

    targets_window.show()
    controls_window.show()
    _LOGGER.info("Starting highlight demo (pid=%s)", os.getpid())
    exit_code = app.exec()
    highlighter.clear()
    _LOGGER.info("Highlight demo exiting with code %s", exit_code)
    return int(exit_code)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Punch-hole highlight overlay")
    parser.add_argument("--config", help="Path to a JSON file with overlay options")
    parser.add_argument(
        "--log-dir",
        nargs="?",
        const="",
        default=None,
        help="Write rotating logs to this directory (default location when no value is given)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Rasterise an overlay to a PNG file")
    render.add_argument("--width", type=int, required=True)
    render.add_argument("--height", type=int, required=True)
    render.add_argument("--rect", type=parse_rect, action="append", help="LEFT,TOP,WIDTH,HEIGHT (repeatable)")
    render.add_argument("-o", "--output", required=True)
    render.set_defaults(handler=run_render)

    demo = subparsers.add_parser("demo", help="Open an interactive demo window")
    demo.set_defaults(handler=run_demo)

    args = parser.parse_args(argv)
    args.overlay_config = _load_config(args.config)
    _LOGGER.setLevel(logging.DEBUG)
    if not _LOGGER.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        stream.setLevel(args.overlay_config.logging_level)
        _LOGGER.addHandler(stream)
    _install_file_logging(args.log_dir, logging.DEBUG)
    return int(args.handler(args))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
