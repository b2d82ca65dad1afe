"""Bounding-geometry sampling for highlight targets."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from PyQt6.QtCore import QPoint
from PyQt6.QtWidgets import QWidget

_LOGGER = logging.getLogger("HighlightOverlay")

GeometryAccessor = Callable[[Any], Any]


@dataclass(frozen=True)
class Rectangle:
    left: float
    top: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    @property
    def half_extent(self) -> float:
        return max(self.width / 2, self.height / 2)


def _read_field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    value = getattr(raw, name, None)
    # Qt rects expose accessor methods (QRectF.width()) instead of attributes.
    if callable(value):
        try:
            value = value()
        except TypeError:
            return None
    return value


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def normalize_rect(raw: Any) -> Optional[Rectangle]:
    """Normalise edge-only or explicit-size geometry to a ``Rectangle``.

    Sources that only carry ``right``/``bottom`` edges get
    ``width = right - left`` and ``height = bottom - top``.
    """
    if raw is None:
        return None
    if isinstance(raw, Rectangle):
        return raw
    left = _as_float(_read_field(raw, "left"))
    top = _as_float(_read_field(raw, "top"))
    if left is None or top is None:
        return None
    width = _as_float(_read_field(raw, "width"))
    height = _as_float(_read_field(raw, "height"))
    if width is None or height is None:
        right = _as_float(_read_field(raw, "right"))
        bottom = _as_float(_read_field(raw, "bottom"))
        if right is None or bottom is None:
            return None
        width = right - left
        height = bottom - top
    return Rectangle(left=left, top=top, width=width, height=height)


def _qt_widget_geometry(target: Any, host: Any) -> Any:
    if not isinstance(target, QWidget):
        return None
    if target.isHidden() or (host is not None and host is not target and not target.isVisibleTo(host)):
        return None
    origin = QPoint(0, 0)
    if host is not None and host is not target:
        origin = host.mapFromGlobal(target.mapToGlobal(origin))
    size = target.size()
    return {"left": origin.x(), "top": origin.y(), "width": size.width(), "height": size.height()}


def default_accessor(host: Any = None) -> GeometryAccessor:
    """Build the default raw-geometry accessor.

    Lookup order: a ``bounding_rect()`` method, a ``geometry`` mapping or
    attribute object, then a Qt widget mapped into ``host`` coordinates.
    """

    def _access(target: Any) -> Any:
        if isinstance(target, Rectangle):
            return target
        bounding_rect = getattr(target, "bounding_rect", None)
        if callable(bounding_rect):
            return bounding_rect()
        if isinstance(target, Mapping):
            return target
        geometry = getattr(target, "geometry", None)
        if geometry is not None and not callable(geometry):
            return geometry
        return _qt_widget_geometry(target, host)

    return _access


class GeometrySampler:
    """Queries each target once per render and normalises its bounding box."""

    def __init__(self, accessor: Optional[GeometryAccessor] = None, *, host: Any = None) -> None:
        self._accessor = accessor or default_accessor(host)

    def sample(self, target: Any) -> Optional[Rectangle]:
        rect = normalize_rect(self._accessor(target))
        if rect is None:
            _LOGGER.debug("No usable geometry for target %r; skipping", target)
        return rect

    def sample_all(self, targets: Iterable[Any]) -> List[Rectangle]:
        rects: List[Rectangle] = []
        for target in targets:
            rect = self.sample(target)
            if rect is not None:
                rects.append(rect)
        return rects
