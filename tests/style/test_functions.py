"""Tests for a11ylint.style.functions."""

from __future__ import annotations

import pytest

from a11ylint.style.colors import ResolvedColor
from a11ylint.style.functions import Number, apply_color_function, parse_number

RED = ResolvedColor(255, 0, 0)
BLACK = ResolvedColor(0, 0, 0)
WHITE = ResolvedColor(255, 255, 255)
BRAND = ResolvedColor(26, 115, 232)


def test_parse_number_keeps_unit() -> None:
    assert parse_number("10%") == Number(10.0, "%")
    assert parse_number("-15deg") == Number(-15.0, "deg")
    assert parse_number(".5") == Number(0.5, "")
    assert parse_number("16px") == Number(16.0, "px")
    assert parse_number("red") is None


def test_amounts_accept_percentages_and_bare_numbers() -> None:
    assert Number(10, "%").fraction() == pytest.approx(0.1)
    assert Number(10, "").fraction() == pytest.approx(0.1)
    assert Number(0.25, "").fraction() == pytest.approx(0.25)


def test_lighten_brand_blue_by_ten_percent() -> None:
    assert apply_color_function("lighten", [BRAND, Number(10, "%")]) == ResolvedColor(72, 143, 237)


def test_darken_clamps_at_black() -> None:
    assert apply_color_function("darken", [RED, Number(80, "%")]) == BLACK


def test_mix_weights_first_color() -> None:
    assert apply_color_function("mix", [BLACK, WHITE]) == ResolvedColor(128, 128, 128)
    assert apply_color_function("mix", [RED, ResolvedColor(0, 0, 255), Number(75, "%")]) == ResolvedColor(191, 0, 64)


def test_rgba_overrides_alpha() -> None:
    assert apply_color_function("rgba", [BLACK, Number(0.5)]) == ResolvedColor(0, 0, 0, 0.5)
    assert apply_color_function("rgb", [Number(10), Number(20), Number(30)]) == ResolvedColor(10, 20, 30)


def test_opacity_functions() -> None:
    faded = apply_color_function("transparentize", [BLACK, Number(0.25)])
    restored = apply_color_function("fade-in", [ResolvedColor(0, 0, 0, 0.5), Number(0.2)])

    assert faded is not None and faded.a == pytest.approx(0.75)
    assert restored is not None and restored.a == pytest.approx(0.7)


def test_hue_functions() -> None:
    assert apply_color_function("adjust-hue", [RED, Number(120, "deg")]) == ResolvedColor(0, 255, 0)
    assert apply_color_function("complement", [RED]) == ResolvedColor(0, 255, 255)
    assert apply_color_function("grayscale", [RED]) == ResolvedColor(128, 128, 128)


def test_invert_with_weight() -> None:
    assert apply_color_function("invert", [BLACK]) == WHITE
    assert apply_color_function("invert", [BLACK, Number(50, "%")]) == ResolvedColor(128, 128, 128)


def test_keyword_color_functions() -> None:
    adjusted = apply_color_function("adjust-color", [BLACK], {"red": Number(20)})
    scaled = apply_color_function("color.scale", [BLACK], {"lightness": Number(50, "%")})
    changed = apply_color_function("change-color", [RED], {"alpha": Number(0.4)})

    assert adjusted == ResolvedColor(20, 0, 0)
    assert scaled == ResolvedColor(128, 128, 128)
    assert changed == ResolvedColor(255, 0, 0, 0.4)


def test_namespaced_and_unknown_functions() -> None:
    assert apply_color_function("color.mix", [BLACK, WHITE]) == ResolvedColor(128, 128, 128)
    assert apply_color_function("color.frobnicate", [BLACK]) is None
    assert apply_color_function("lighten", [Number(10, "%")]) is None
