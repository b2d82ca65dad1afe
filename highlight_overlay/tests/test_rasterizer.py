from __future__ import annotations

from typing import List

import pytest

from highlight_overlay.geometry import Rectangle
from highlight_overlay.overlay_config import RGBA, OverlayConfig
from highlight_overlay.png_encoder import EncodedImage, EncodingError
from highlight_overlay.rasterizer import (
    BACKGROUND_INDEX,
    FILL_INDEX,
    PixelBuffer,
    Rasterizer,
    RenderStatus,
    draw_disk,
    rasterize,
)


class RecordingEncoder:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    def encode(self, width, height, palette, indices, *, palette_bound=256):
        self.calls.append((width, height, list(palette), bytes(indices), palette_bound))
        if self.fail:
            raise EncodingError("boom")
        return EncodedImage(b"png:" + bytes(indices[:4]))


def _config(**options) -> OverlayConfig:
    return OverlayConfig.from_options(options)


def test_worked_example_800x600():
    config = _config(radiusMultiplier=2, fillRed=255)
    buffer = rasterize([Rectangle(100, 100, 50, 30)], 800, 600, config)
    assert (buffer.width, buffer.height) == (800, 600)
    assert buffer.color_at(125, 115) == config.fill
    assert buffer.color_at(0, 0) == config.background
    assert buffer.color_at(125, 165) == config.fill
    assert buffer.color_at(125, 170) == config.background
    assert buffer.color_at(175, 115) == config.fill
    assert buffer.color_at(176, 115) == config.background


@pytest.mark.parametrize("size", [(1, 1), (3, 7), (640, 480)])
def test_buffer_dimensions_match_viewport(size):
    width, height = size
    buffer = rasterize([Rectangle(0, 0, 1, 1)], width, height, _config())
    assert (buffer.width, buffer.height) == (width, height)
    assert len(buffer.indices) == width * height


def test_non_positive_radius_draws_nothing():
    buffer = PixelBuffer.filled(20, 20, [RGBA(), RGBA(1, 1, 1, 1)])
    assert draw_disk(buffer, 10, 10, 0, FILL_INDEX) == 0
    assert draw_disk(buffer, 10, 10, -4, FILL_INDEX) == 0
    assert draw_disk(buffer, 10, 10, float("nan"), FILL_INDEX) == 0
    assert buffer.count(FILL_INDEX) == 0

    zero_multiplier = rasterize([Rectangle(5, 5, 10, 10)], 20, 20, _config(radiusMultiplier=0))
    assert zero_multiplier.count(FILL_INDEX) == 0

    flat = rasterize([Rectangle(5, 5, 0, 0)], 20, 20, _config())
    assert flat.count(FILL_INDEX) == 0


def test_offscreen_target_contributes_no_pixels():
    config = _config(radiusMultiplier=1)
    for rect in (Rectangle(500, 500, 10, 10), Rectangle(-100, -100, 10, 10), Rectangle(5, -60, 10, 10)):
        buffer = rasterize([rect], 50, 50, config)
        assert buffer.count(FILL_INDEX) == 0


def test_disk_is_clipped_at_edges():
    buffer = PixelBuffer.filled(10, 10, [RGBA(), RGBA(1, 1, 1, 1)])
    written = draw_disk(buffer, 0, 0, 3, FILL_INDEX)
    # Quarter disk of radius 3 including the axes: rows dy=0..3 give spans 3,2,2,0.
    assert written == 4 + 3 + 3 + 1
    assert buffer.count(FILL_INDEX) == written
    assert buffer.pixel(3, 0) == FILL_INDEX
    assert buffer.pixel(3, 1) == BACKGROUND_INDEX


def test_disk_membership_uses_floored_center():
    buffer = PixelBuffer.filled(10, 10, [RGBA(), RGBA(1, 1, 1, 1)])
    draw_disk(buffer, 4.9, 4.9, 1, FILL_INDEX)
    filled = {(x, y) for y in range(10) for x in range(10) if buffer.pixel(x, y) == FILL_INDEX}
    assert filled == {(4, 4), (3, 4), (5, 4), (4, 3), (4, 5)}


def test_overlap_is_last_write_wins():
    palette = [RGBA(), RGBA(255, 0, 0, 255), RGBA(0, 0, 255, 255)]
    buffer = PixelBuffer.filled(40, 20, palette)
    draw_disk(buffer, 12, 10, 8, 1)
    draw_disk(buffer, 20, 10, 8, 2)
    assert buffer.pixel(16, 10) == 2
    assert buffer.pixel(5, 10) == 1
    assert buffer.pixel(27, 10) == 2
    assert set(buffer.indices) == {0, 1, 2}


def test_rasterize_is_deterministic():
    rects = [Rectangle(10.3, 20.7, 30, 12), Rectangle(50, 5, 8, 40)]
    first = rasterize(rects, 120, 90, _config())
    second = rasterize(rects, 120, 90, _config())
    assert first.indices == second.indices


def test_render_without_targets_is_empty_signal():
    encoder = RecordingEncoder()
    result = Rasterizer(_config(), encoder).render([], 100, 100)
    assert result.status is RenderStatus.EMPTY
    assert result.image is None
    assert encoder.calls == []


def test_render_hands_buffer_to_encoder():
    encoder = RecordingEncoder()
    config = _config()
    result = Rasterizer(config, encoder).render([Rectangle(0, 0, 4, 4)], 8, 6)
    assert result.succeeded
    assert result.image is not None and result.image.data.startswith(b"png:")
    width, height, palette, indices, bound = encoder.calls[0]
    assert (width, height) == (8, 6)
    assert palette == [config.background, config.fill]
    assert len(indices) == 48
    assert bound == 256
    assert result.buffer is not None and bytes(result.buffer.indices) == indices


def test_encoder_failure_becomes_failure_signal():
    result = Rasterizer(_config(), RecordingEncoder(fail=True)).render([Rectangle(0, 0, 4, 4)], 8, 6)
    assert result.status is RenderStatus.FAILED
    assert result.reason == "boom"
    assert result.image is None


def test_sampling_errors_do_not_escape_render():
    class Broken:
        def bounding_rect(self):
            raise RuntimeError("wrapped C/C++ object has been deleted")

    result = Rasterizer(_config(), RecordingEncoder()).render([Broken()], 8, 6)
    assert result.status is RenderStatus.FAILED
    assert "deleted" in result.reason


def test_unresolvable_targets_still_render_background():
    encoder = RecordingEncoder()
    result = Rasterizer(_config(), encoder).render([{"left": 0}], 4, 4)
    assert result.succeeded
    assert result.buffer is not None and result.buffer.count(FILL_INDEX) == 0


def test_huge_radius_multiplier_covers_whole_buffer():
    rasterizer = Rasterizer(_config(radiusMultiplier=1e200), RecordingEncoder())
    result = rasterizer.render([Rectangle(10, 10, 4, 4)], 20, 20)
    assert result.status is RenderStatus.OK
    assert result.buffer.count(FILL_INDEX) == 20 * 20


def test_huge_radius_from_offscreen_center_still_reaches_buffer():
    buffer = PixelBuffer.filled(16, 8, [RGBA(), RGBA(1, 1, 1, 1)])
    assert draw_disk(buffer, -500, 4, 1e300, FILL_INDEX) == 16 * 8
