"""Colour literals, HSL conversion and WCAG contrast math."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

AA_NORMAL = 4.5
AA_LARGE = 3.0
AAA_NORMAL = 7.0
AAA_LARGE = 4.5

NAMED_COLORS = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "lime": (0, 255, 0),
    "blue": (0, 0, 255),
    "navy": (0, 0, 128),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "aqua": (0, 255, 255),
    "magenta": (255, 0, 255),
    "fuchsia": (255, 0, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "lightgray": (211, 211, 211),
    "lightgrey": (211, 211, 211),
    "darkgray": (169, 169, 169),
    "darkgrey": (169, 169, 169),
    "whitesmoke": (245, 245, 245),
    "gainsboro": (220, 220, 220),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "pink": (255, 192, 203),
    "brown": (165, 42, 42),
    "maroon": (128, 0, 0),
    "olive": (128, 128, 0),
    "teal": (0, 128, 128),
}

_HEX_PATTERN = re.compile(r"^#([0-9a-f]{3,8})$")
_FUNCTION_PATTERN = re.compile(r"^(rgba?|hsla?)\(\s*(.*?)\s*\)$", re.DOTALL)
_NUMBER_PATTERN = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(%|deg)?$")


@dataclass(frozen=True)
class ResolvedColor:
    """Concrete colour: channels 0-255, alpha 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def to_hex(self) -> str:
        channels = (_to_byte(self.r), _to_byte(self.g), _to_byte(self.b))
        if self.a < 1:
            return f"rgba({channels[0]}, {channels[1]}, {channels[2]}, {self.a:.2f})"
        return "#" + "".join(f"{value:02x}" for value in channels)

    def rounded(self) -> "ResolvedColor":
        return ResolvedColor(
            float(_to_byte(self.r)),
            float(_to_byte(self.g)),
            float(_to_byte(self.b)),
            clamp(self.a, 0.0, 1.0),
        )


@dataclass(frozen=True)
class ContrastResult:
    """Contrast ratio plus pass/fail per WCAG threshold."""

    ratio: float
    aa_normal: bool
    aa_large: bool
    aaa_normal: bool
    aaa_large: bool


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def _to_byte(value: float) -> int:
    return int(clamp(round(value), 0, 255))


def parse_color(value: str) -> Optional[ResolvedColor]:
    """Parse a colour literal. Returns ``None`` for anything that is not one."""
    if not value:
        return None
    text = value.strip().lower()
    if text == "transparent":
        return ResolvedColor(0, 0, 0, 0.0)
    if text in NAMED_COLORS:
        r, g, b = NAMED_COLORS[text]
        return ResolvedColor(r, g, b, 1.0)

    hex_match = _HEX_PATTERN.match(text)
    if hex_match:
        return _parse_hex(hex_match.group(1))

    func_match = _FUNCTION_PATTERN.match(text)
    if func_match:
        name, inner = func_match.groups()
        parts = [part for part in re.split(r"[\s,/]+", inner) if part]
        if not all(_NUMBER_PATTERN.match(part) for part in parts):
            return None
        if name.startswith("rgb"):
            return _from_rgb_parts(parts)
        return _from_hsl_parts(parts)
    return None


def _parse_hex(digits: str) -> Optional[ResolvedColor]:
    if len(digits) in (3, 4):
        digits = "".join(char * 2 for char in digits)
    if len(digits) == 6:
        return ResolvedColor(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    if len(digits) == 8:
        return ResolvedColor(
            int(digits[0:2], 16),
            int(digits[2:4], 16),
            int(digits[4:6], 16),
            int(digits[6:8], 16) / 255,
        )
    return None


def parse_channel(token: str) -> float:
    if token.endswith("%"):
        return clamp(float(token[:-1]) * 255 / 100, 0, 255)
    return clamp(float(token), 0, 255)


def parse_alpha(token: str) -> float:
    if token.endswith("%"):
        return clamp(float(token[:-1]) / 100, 0.0, 1.0)
    return clamp(float(token), 0.0, 1.0)


def _from_rgb_parts(parts: list[str]) -> Optional[ResolvedColor]:
    if len(parts) not in (3, 4) or any(part.endswith("deg") for part in parts):
        return None
    r, g, b = (parse_channel(part) for part in parts[:3])
    alpha = parse_alpha(parts[3]) if len(parts) == 4 else 1.0
    return ResolvedColor(round(r), round(g), round(b), alpha)


def _from_hsl_parts(parts: list[str]) -> Optional[ResolvedColor]:
    if len(parts) not in (3, 4):
        return None
    hue, saturation, lightness = parts[:3]
    # hue is an angle; saturation, lightness and alpha are numbers or percentages
    if hue.endswith("%") or any(part.endswith("deg") for part in parts[1:]):
        return None
    alpha = parse_alpha(parts[3]) if len(parts) == 4 else 1.0
    return from_hsl(
        float(hue.removesuffix("deg")),
        float(saturation.removesuffix("%")) / 100,
        float(lightness.removesuffix("%")) / 100,
        alpha,
    )


def to_hsl(color: ResolvedColor) -> Tuple[float, float, float]:
    """Return ``(hue degrees, saturation 0-1, lightness 0-1)``."""
    r, g, b = color.r / 255, color.g / 255, color.b / 255
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2
    if high == low:
        return 0.0, 0.0, lightness

    delta = high - low
    if lightness > 0.5:
        saturation = delta / (2 - high - low)
    else:
        saturation = delta / (high + low)

    if high == r:
        hue = (g - b) / delta + (6 if g < b else 0)
    elif high == g:
        hue = (b - r) / delta + 2
    else:
        hue = (r - g) / delta + 4
    return hue * 60, saturation, lightness


def from_hsl(hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> ResolvedColor:
    hue = (hue % 360) / 360
    saturation = clamp(saturation, 0.0, 1.0)
    lightness = clamp(lightness, 0.0, 1.0)
    if saturation == 0:
        value = round(lightness * 255)
        return ResolvedColor(value, value, value, alpha)

    q = lightness * (1 + saturation) if lightness < 0.5 else lightness + saturation - lightness * saturation
    p = 2 * lightness - q
    return ResolvedColor(
        round(_hue_to_channel(p, q, hue + 1 / 3) * 255),
        round(_hue_to_channel(p, q, hue) * 255),
        round(_hue_to_channel(p, q, hue - 1 / 3) * 255),
        alpha,
    )


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def composite(foreground: ResolvedColor, background: ResolvedColor) -> ResolvedColor:
    """Blend a translucent foreground over an (assumed opaque) background."""
    alpha = clamp(foreground.a, 0.0, 1.0)
    if alpha >= 1:
        return foreground
    return ResolvedColor(
        foreground.r * alpha + background.r * (1 - alpha),
        foreground.g * alpha + background.g * (1 - alpha),
        foreground.b * alpha + background.b * (1 - alpha),
        1.0,
    )


def _linearize(channel: float) -> float:
    value = clamp(channel, 0, 255) / 255
    if value <= 0.03928:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def relative_luminance(color: ResolvedColor) -> float:
    return (
        0.2126 * _linearize(color.r)
        + 0.7152 * _linearize(color.g)
        + 0.0722 * _linearize(color.b)
    )


def contrast_ratio(first: ResolvedColor, second: ResolvedColor) -> float:
    """WCAG contrast ratio. Alpha is ignored; composite beforehand if needed."""
    lum_a = relative_luminance(first)
    lum_b = relative_luminance(second)
    lighter, darker = max(lum_a, lum_b), min(lum_a, lum_b)
    return (lighter + 0.05) / (darker + 0.05)


def evaluate_contrast(foreground: ResolvedColor, background: ResolvedColor) -> ContrastResult:
    ratio = contrast_ratio(composite(foreground, background), background)
    return ContrastResult(
        ratio=ratio,
        aa_normal=ratio >= AA_NORMAL,
        aa_large=ratio >= AA_LARGE,
        aaa_normal=ratio >= AAA_NORMAL,
        aaa_large=ratio >= AAA_LARGE,
    )


__all__ = [
    "AAA_LARGE",
    "AAA_NORMAL",
    "AA_LARGE",
    "AA_NORMAL",
    "ContrastResult",
    "ResolvedColor",
    "clamp",
    "composite",
    "contrast_ratio",
    "evaluate_contrast",
    "from_hsl",
    "parse_color",
    "relative_luminance",
    "to_hsl",
]
