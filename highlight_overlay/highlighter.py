"""Punch-hole highlight overlay controller.

The controller owns the overlay panel, the active target list and the resize
epoch. Renders requested by ``init()``/``show_highlight()`` run immediately;
renders triggered by host resizes are debounced: each resize swaps the shown
image for a flat placeholder, bumps the epoch and schedules a render that only
runs if no newer resize arrived and ``clear()`` has not been called since.

Rendering is synchronous on the Qt event loop. There is no timeout around the
encoder, so a stalled encoder blocks the loop for as long as it stalls.
"""
from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from highlight_overlay.event_binding import ResizeBinding
from highlight_overlay.geometry import GeometrySampler
from highlight_overlay.logging_utils import InstanceLogger, instance_logger
from highlight_overlay.overlay_config import OverlayConfig
from highlight_overlay.panel import DisplaySurface, HighlightPanel
from highlight_overlay.png_encoder import ImageEncoder, QtPngEncoder
from highlight_overlay.rasterizer import Rasterizer, RenderResult, RenderStatus
from highlight_overlay.scheduler import QtRenderScheduler, RenderScheduler, ScheduledTask
from highlight_overlay.viewport import qt_viewport_accessors, resolve_viewport_size


class HighlightState(enum.Enum):
    HIDDEN = "hidden"
    DISPLAYED = "displayed"


class Highlighter:
    """Draws attention to target widgets by dimming everything around them."""

    def __init__(
        self,
        options: Union[OverlayConfig, Mapping[str, Any], None] = None,
        *,
        host: Any = None,
        encoder: Optional[ImageEncoder] = None,
        sampler: Optional[GeometrySampler] = None,
        scheduler: Optional[RenderScheduler] = None,
        viewport_fn: Optional[Callable[[], Tuple[int, int]]] = None,
        panel_factory: Optional[Callable[[], DisplaySurface]] = None,
        binding: Optional[ResizeBinding] = None,
    ) -> None:
        if host is None and panel_factory is None:
            raise ValueError("Highlighter needs a host widget or a panel factory")
        self._config = options if isinstance(options, OverlayConfig) else OverlayConfig.from_options(options)
        self._logger = instance_logger(self._config.logging_level)
        self._host = host
        self._rasterizer = Rasterizer(
            self._config,
            encoder or QtPngEncoder(),
            sampler=sampler or GeometrySampler(host=host),
            logger=self._logger,
        )
        self._scheduler: RenderScheduler = scheduler or QtRenderScheduler(host)
        if viewport_fn is None:
            accessors = qt_viewport_accessors(host)
            viewport_fn = lambda: resolve_viewport_size(accessors)  # noqa: E731
        self._viewport_fn = viewport_fn
        self._panel_factory = panel_factory or (lambda: HighlightPanel(host))
        self._binding = binding if binding is not None else ResizeBinding(host, logger=self._logger)

        self._state = HighlightState.HIDDEN
        self._active = False
        self._targets: List[Any] = []
        self._epoch = 0
        self._panel: Optional[DisplaySurface] = None
        self._showing_image = False
        self._pending: Optional[ScheduledTask] = None

    # Introspection -----------------------------------------------

    @property
    def config(self) -> OverlayConfig:
        return self._config

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def targets(self) -> Tuple[Any, ...]:
        return tuple(self._targets)

    @property
    def panel(self) -> Optional[DisplaySurface]:
        return self._panel

    @property
    def logger(self) -> InstanceLogger:
        return self._logger

    # Public API --------------------------------------------------

    def init(self, targets: Optional[Iterable[Any]]) -> Optional[RenderResult]:
        """Replace the highlight targets, re-rendering at once when displayed."""
        self._targets = list(targets) if targets is not None else []
        self._logger.debug("Initialized highlighter with %d targets.", len(self._targets))
        if self._state is HighlightState.DISPLAYED:
            return self._update_highlight()
        return None

    def show_highlight(self) -> RenderResult:
        """Bind to host resizes, display the overlay and render it immediately."""
        self._logger.info("Showing highlighter.")
        self._active = True
        # A missing binding only disables resize refreshes.
        self._binding.attach(self.handle_resize)
        self._state = HighlightState.DISPLAYED
        return self._update_highlight()

    def clear(self) -> None:
        """Drop the targets, cancel pending renders and remove the panel."""
        self._logger.info("Clearing highlighter.")
        self._active = False
        self._cancel_pending()
        self._binding.detach()
        self._state = HighlightState.HIDDEN
        self._targets = []
        self._showing_image = False
        if self._panel is not None and self._panel.is_attached:
            self._panel.detach()

    def handle_resize(self) -> None:
        """React to one host resize event."""
        if not self._active:
            return
        panel = self._panel
        if panel is not None and panel.is_attached and self._showing_image:
            # Once per burst: later events find the placeholder already shown.
            self._showing_image = False
            panel.show_color(self._config.background)
        self._epoch += 1
        epoch = self._epoch
        self._cancel_pending()
        self._pending = self._scheduler.schedule(
            self._config.resize_delay_ms,
            lambda: self._run_scheduled_render(epoch),
        )

    # Internals ---------------------------------------------------

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _run_scheduled_render(self, epoch: int) -> Optional[RenderResult]:
        if not self._active:
            self._logger.debug("Dropping scheduled render for epoch %d; highlighter cleared.", epoch)
            return None
        if epoch != self._epoch:
            self._logger.debug("Dropping scheduled render for epoch %d; superseded by %d.", epoch, self._epoch)
            return None
        self._pending = None
        return self._update_highlight()

    def _ensure_panel(self) -> DisplaySurface:
        if self._panel is None:
            self._panel = self._panel_factory()
        return self._panel

    def _update_highlight(self) -> RenderResult:
        self._logger.info("Updating highlighter.")
        width, height = self._viewport_fn()
        result = self._rasterizer.render(self._targets, width, height)
        if result.status is RenderStatus.EMPTY:
            return result
        if result.status is RenderStatus.FAILED or result.image is None:
            self._logger.error("Failed to generate highlight image: %s", result.reason)
            return result

        panel = self._ensure_panel()
        if not panel.show_image(result.image):
            self._logger.error("Display surface rejected the highlight image.")
            return RenderResult.failed("display surface rejected image", result.buffer)
        if panel.is_attached:
            panel.detach()
        panel.attach()
        self._showing_image = True
        return result
