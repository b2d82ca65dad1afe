from __future__ import annotations

import json
import logging

import pytest

from highlight_overlay.overlay_config import RGBA, OverlayConfig, load_overlay_config


def test_defaults_match_documented_values():
    config = OverlayConfig.from_options(None)
    assert config.background == RGBA(0, 0, 0, 155)
    assert config.fill == RGBA(0, 0, 0, 10)
    assert config.radius_multiplier == pytest.approx(1.75)
    assert config.logging_level == logging.ERROR
    assert config.resize_delay_ms == 200


def test_fill_alpha_in_range_is_preserved_and_out_of_range_falls_back():
    assert OverlayConfig.from_options({"fillAlpha": 255}).fill.a == 255
    assert OverlayConfig.from_options({"fillAlpha": 300}).fill.a == 10


@pytest.mark.parametrize("bad", [-1, 256, "12", None, True, float("nan"), [3]])
def test_invalid_channels_default_independently(bad):
    config = OverlayConfig.from_options({"backgroundRed": bad, "backgroundGreen": 40})
    assert config.background.r == 0
    assert config.background.g == 40


def test_snake_case_options_are_accepted():
    config = OverlayConfig.from_options({"fill_red": 200, "background_alpha": 0, "radius_multiplier": 2})
    assert config.fill.r == 200
    assert config.background.a == 0
    assert config.radius_multiplier == 2.0


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0.0),
        (2.5, 2.5),
        (-0.5, 1.75),
        ("2", 1.75),
        (float("inf"), 1.75),
        (False, 1.75),
    ],
)
def test_radius_multiplier_validation(value, expected):
    assert OverlayConfig.from_options({"radiusMultiplier": value}).radius_multiplier == pytest.approx(expected)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("debug", logging.DEBUG),
        (" INFO ", logging.INFO),
        ("warn", logging.WARNING),
        ("error", logging.ERROR),
        (0, logging.DEBUG),
        (2.7, logging.WARNING),
        (7, logging.ERROR),
        ("verbose", logging.ERROR),
    ],
)
def test_logging_level_parsing(value, expected):
    assert OverlayConfig.from_options({"loggingLevel": value}).logging_level == expected


def test_css_scales_alpha():
    assert RGBA(10, 20, 30, 255).css() == "rgba(10, 20, 30, 1.0000)"
    assert RGBA(0, 0, 0, 0).css() == "rgba(0, 0, 0, 0.0000)"


def test_load_overlay_config_reads_json(tmp_path):
    path = tmp_path / "overlay.json"
    path.write_text(json.dumps({"fillAlpha": 99, "radiusMultiplier": 3}), encoding="utf-8")
    config = load_overlay_config(path)
    assert config.fill.a == 99
    assert config.radius_multiplier == 3.0


def test_load_overlay_config_falls_back_on_missing_or_malformed(tmp_path):
    assert load_overlay_config(tmp_path / "missing.json") == OverlayConfig()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_overlay_config(broken) == OverlayConfig()
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]", encoding="utf-8")
    assert load_overlay_config(listed) == OverlayConfig()
