"""Punch-hole highlight overlay for PyQt6 widgets."""

from highlight_overlay.highlighter import HighlightState, Highlighter
from highlight_overlay.overlay_config import RGBA, OverlayConfig, load_overlay_config
from highlight_overlay.rasterizer import Rasterizer, RenderResult, RenderStatus

__version__ = "1.0.0"

__all__ = [
    "HighlightState",
    "Highlighter",
    "OverlayConfig",
    "RGBA",
    "Rasterizer",
    "RenderResult",
    "RenderStatus",
    "load_overlay_config",
    "__version__",
]
