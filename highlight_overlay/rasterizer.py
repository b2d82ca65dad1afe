"""Punch-hole rasterisation of highlight targets into an indexed pixel buffer."""
from __future__ import annotations

import enum
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

from highlight_overlay.geometry import GeometrySampler, Rectangle
from highlight_overlay.overlay_config import RGBA, OverlayConfig
from highlight_overlay.png_encoder import PALETTE_SIZE_BOUND, EncodedImage, ImageEncoder

BACKGROUND_INDEX = 0
FILL_INDEX = 1


@dataclass
class PixelBuffer:
    """Row-major grid of palette indices for a single render."""

    width: int
    height: int
    palette: List[RGBA]
    indices: bytearray = field(repr=False)

    @classmethod
    def filled(cls, width: int, height: int, palette: Sequence[RGBA], index: int = BACKGROUND_INDEX) -> "PixelBuffer":
        width = max(0, int(width))
        height = max(0, int(height))
        return cls(width, height, list(palette), bytearray([index]) * (width * height))

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return self.indices[self.index(x, y)]

    def color_at(self, x: int, y: int) -> RGBA:
        return self.palette[self.pixel(x, y)]

    def count(self, index: int) -> int:
        return self.indices.count(index)


def _row_span(dy: int, radius_sq: float) -> int:
    """Largest integer dx with dx*dx + dy*dy <= radius_sq (caller ensures dy is inside)."""
    remaining = radius_sq - dy * dy
    span = int(math.sqrt(remaining))
    while (span + 1) * (span + 1) <= remaining:
        span += 1
    while span > 0 and span * span > remaining:
        span -= 1
    return span


def draw_disk(buffer: PixelBuffer, center_x: float, center_y: float, radius: float, color_index: int) -> int:
    """Stamp a filled disk and return the number of pixels written.

    A pixel at integer offset (x, y) from the floored centre belongs to the
    disk iff x*x + y*y <= radius*radius. Pixels outside the buffer are
    clipped. Non-positive or non-finite radii draw nothing.
    """
    if not (math.isfinite(radius) and math.isfinite(center_x) and math.isfinite(center_y)) or radius <= 0:
        return 0
    cx = math.floor(center_x)
    cy = math.floor(center_y)
    # Past the farthest corner the disk already covers every pixel.
    farthest = math.hypot(max(abs(cx), abs(buffer.width - cx)), max(abs(cy), abs(buffer.height - cy)))
    radius = min(radius, farthest + 1)
    radius_sq = radius * radius
    reach = math.floor(radius)
    width = buffer.width
    written = 0
    for dy in range(max(-reach, -cy), min(reach, buffer.height - 1 - cy) + 1):
        span = _row_span(dy, radius_sq)
        start = max(cx - span, 0)
        stop = min(cx + span, width - 1)
        if start > stop:
            continue
        row = (cy + dy) * width
        buffer.indices[row + start:row + stop + 1] = bytes([color_index]) * (stop - start + 1)
        written += stop - start + 1
    return written


def rasterize(rects: Sequence[Rectangle], width: int, height: int, config: OverlayConfig) -> PixelBuffer:
    """Fill the background and stamp one disk per rectangle, later disks winning."""
    buffer = PixelBuffer.filled(width, height, [config.background, config.fill])
    for rect in rects:
        center_x, center_y = rect.center
        draw_disk(buffer, center_x, center_y, rect.half_extent * config.radius_multiplier, FILL_INDEX)
    return buffer


class RenderStatus(enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderResult:
    status: RenderStatus
    image: Optional[EncodedImage] = None
    buffer: Optional[PixelBuffer] = None
    reason: str = ""

    @classmethod
    def ok(cls, image: EncodedImage, buffer: PixelBuffer) -> "RenderResult":
        return cls(RenderStatus.OK, image=image, buffer=buffer)

    @classmethod
    def empty(cls) -> "RenderResult":
        return cls(RenderStatus.EMPTY, reason="no targets")

    @classmethod
    def failed(cls, reason: str, buffer: Optional[PixelBuffer] = None) -> "RenderResult":
        return cls(RenderStatus.FAILED, buffer=buffer, reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.status is RenderStatus.OK


class Rasterizer:
    """Turns highlight targets into an encoded overlay image.

    Never raises across its boundary: empty input and encoder failures come
    back as ``RenderResult`` values.
    """

    def __init__(
        self,
        config: OverlayConfig,
        encoder: ImageEncoder,
        *,
        sampler: Optional[GeometrySampler] = None,
        logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
    ) -> None:
        self._config = config
        self._encoder = encoder
        self._sampler = sampler or GeometrySampler()
        self._logger = logger or logging.getLogger("HighlightOverlay")

    @property
    def config(self) -> OverlayConfig:
        return self._config

    def render(self, targets: Sequence[Any], width: int, height: int) -> RenderResult:
        if not targets:
            self._logger.warning("No targets have been specified for highlighting.")
            return RenderResult.empty()

        build_start = time.perf_counter()
        buffer: Optional[PixelBuffer] = None
        try:
            rects = self._sampler.sample_all(targets)
            buffer = rasterize(rects, width, height, self._config)
            build_end = time.perf_counter()
            image = self._encoder.encode(
                buffer.width,
                buffer.height,
                buffer.palette,
                bytes(buffer.indices),
                palette_bound=PALETTE_SIZE_BOUND,
            )
        except Exception as exc:
            self._logger.error("Image generation failed: %s", exc)
            return RenderResult.failed(str(exc) or exc.__class__.__name__, buffer)
        encode_end = time.perf_counter()

        self._logger.debug("Image size: (%d, %d)", buffer.width, buffer.height)
        self._logger.debug("Image build time: %.1fms", (build_end - build_start) * 1000.0)
        self._logger.debug("Image encode time: %.1fms", (encode_end - build_end) * 1000.0)
        self._logger.debug("Image total time: %.1fms", (encode_end - build_start) * 1000.0)
        return RenderResult.ok(image, buffer)
