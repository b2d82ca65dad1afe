"""Configuration helpers for the highlight overlay."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from highlight_overlay.logging_utils import package_logger, parse_log_level

DEFAULT_RESIZE_DELAY_MS = 200
DEFAULT_RADIUS_MULTIPLIER = 1.75


@dataclass(frozen=True)
class RGBA:
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    def css(self) -> str:
        """Return a CSS/Qt stylesheet colour with alpha scaled to 0..1."""
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a / 255:.4f})"


@dataclass(frozen=True)
class OverlayConfig:
    """Immutable per-instance overlay settings."""

    background: RGBA = field(default_factory=lambda: RGBA(0, 0, 0, 155))
    fill: RGBA = field(default_factory=lambda: RGBA(0, 0, 0, 10))
    radius_multiplier: float = DEFAULT_RADIUS_MULTIPLIER
    logging_level: int = logging.ERROR
    resize_delay_ms: int = DEFAULT_RESIZE_DELAY_MS

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "OverlayConfig":
        """Build a config from named options, defaulting each invalid value on its own."""
        data: Mapping[str, Any] = options if isinstance(options, Mapping) else {}
        defaults = cls()

        def _lookup(camel: str, snake: str) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake)

        def _color(camel: str, snake: str, fallback: int) -> int:
            raw = _lookup(camel, snake)
            if raw is not None and not _is_channel(raw):
                _log_invalid(camel, raw, fallback)
            return _verify_color(raw, fallback)

        background = RGBA(
            _color("backgroundRed", "background_red", defaults.background.r),
            _color("backgroundGreen", "background_green", defaults.background.g),
            _color("backgroundBlue", "background_blue", defaults.background.b),
            _color("backgroundAlpha", "background_alpha", defaults.background.a),
        )
        fill = RGBA(
            _color("fillRed", "fill_red", defaults.fill.r),
            _color("fillGreen", "fill_green", defaults.fill.g),
            _color("fillBlue", "fill_blue", defaults.fill.b),
            _color("fillAlpha", "fill_alpha", defaults.fill.a),
        )

        raw_multiplier = _lookup("radiusMultiplier", "radius_multiplier")
        radius_multiplier = _verify_radius_multiplier(raw_multiplier, defaults.radius_multiplier)
        if raw_multiplier is not None and _verify_radius_multiplier(raw_multiplier, -1.0) < 0:
            _log_invalid("radiusMultiplier", raw_multiplier, defaults.radius_multiplier)

        raw_delay = _lookup("resizeDelayMs", "resize_delay_ms")
        resize_delay_ms = _verify_delay(raw_delay, defaults.resize_delay_ms)

        return cls(
            background=background,
            fill=fill,
            radius_multiplier=radius_multiplier,
            logging_level=parse_log_level(_lookup("loggingLevel", "logging_level"), defaults.logging_level),
            resize_delay_ms=resize_delay_ms,
        )


def _log_invalid(option: str, value: Any, fallback: Any) -> None:
    package_logger().debug("Ignoring invalid %s=%r; using default %r", option, value, fallback)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_channel(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value) and 0 <= value <= 255


def _verify_color(value: Any, default: int) -> int:
    return int(value) if _is_channel(value) else default


def _verify_radius_multiplier(value: Any, default: float) -> float:
    if _is_number(value) and math.isfinite(value) and value >= 0:
        return float(value)
    return default


def _verify_delay(value: Any, default: int) -> int:
    if _is_number(value) and math.isfinite(value) and value >= 0:
        return int(value)
    return default


def load_overlay_config(path: Path) -> OverlayConfig:
    """Read overlay options from a JSON file, falling back to defaults on any error."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return OverlayConfig()
    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        package_logger().warning("Failed to parse %s; using default overlay options", path)
        return OverlayConfig()
    if not isinstance(data, dict):
        package_logger().warning("Overlay options at %s are not a JSON object; using defaults", path)
        return OverlayConfig()
    return OverlayConfig.from_options(data)
