from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Optional, Sequence, Tuple

from PyQt6.QtGui import QGuiApplication

_LOGGER = logging.getLogger("HighlightOverlay")

Size = Tuple[int, int]
SizeAccessor = Callable[[], Optional[Tuple[float, float]]]


def _positive_floor(value: Any) -> Optional[int]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    floored = math.floor(number)
    return floored if floored > 0 else None


def resolve_viewport_size(accessors: Sequence[SizeAccessor]) -> Size:
    """Return the first available width and height, each in priority order.

    Width and height are resolved independently, so a source that reports a
    usable width but no height still contributes its width.
    """
    width: Optional[int] = None
    height: Optional[int] = None
    for accessor in accessors:
        if width is not None and height is not None:
            break
        try:
            size = accessor()
        except Exception as exc:
            _LOGGER.debug("Viewport accessor %r failed: %s", accessor, exc)
            continue
        if not size:
            continue
        if width is None:
            width = _positive_floor(size[0])
        if height is None:
            height = _positive_floor(size[1])
    return (width or 0, height or 0)


def qt_viewport_accessors(host: Any) -> List[SizeAccessor]:
    """Host widget size, then its top-level window, then the primary screen."""

    def _host_size() -> Optional[Tuple[float, float]]:
        if host is None:
            return None
        return (host.width(), host.height())

    def _window_size() -> Optional[Tuple[float, float]]:
        if host is None:
            return None
        window = host.window()
        return (window.width(), window.height())

    def _screen_size() -> Optional[Tuple[float, float]]:
        screen = QGuiApplication.primaryScreen()
        if screen is None:
            return None
        geometry = screen.availableGeometry()
        return (geometry.width(), geometry.height())

    return [_host_size, _window_size, _screen_size]
