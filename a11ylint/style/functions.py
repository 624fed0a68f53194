"""Closed-form colour functions (``lighten``, ``mix``, ``rgba`` ...)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from .colors import ResolvedColor, clamp, from_hsl, to_hsl

_NUMBER_PATTERN = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+))(%|deg|[a-z]+)?$", re.IGNORECASE)


@dataclass(frozen=True)
class Number:
    """A numeric argument with its unit (``%``, ``deg``, ``px`` or empty)."""

    value: float
    unit: str = ""

    def fraction(self) -> float:
        """Percentages and bare values > 1 become 0-1 fractions."""
        if self.unit == "%":
            return self.value / 100
        if abs(self.value) > 1:
            return self.value / 100
        return self.value

    def alpha(self) -> float:
        if self.unit == "%":
            return self.value / 100
        return self.value


Value = Union[ResolvedColor, Number, str]
ColorFunction = Callable[[Sequence[Value], Mapping[str, Value]], Optional[ResolvedColor]]


def parse_number(text: str) -> Optional[Number]:
    match = _NUMBER_PATTERN.match(text.strip())
    if not match:
        return None
    return Number(float(match.group(1)), (match.group(2) or "").lower())


def _color_arg(args: Sequence[Value], index: int) -> Optional[ResolvedColor]:
    if index < len(args) and isinstance(args[index], ResolvedColor):
        return args[index]  # type: ignore[return-value]
    return None


def _number_arg(
    args: Sequence[Value],
    index: int,
    keywords: Mapping[str, Value] | None = None,
    keyword: str | None = None,
) -> Optional[Number]:
    if keywords and keyword and isinstance(keywords.get(keyword), Number):
        return keywords[keyword]  # type: ignore[return-value]
    if index < len(args) and isinstance(args[index], Number):
        return args[index]  # type: ignore[return-value]
    return None


def _shift_hsl(
    color: ResolvedColor,
    *,
    hue: float = 0.0,
    saturation: float = 0.0,
    lightness: float = 0.0,
) -> ResolvedColor:
    h, s, l = to_hsl(color)
    return from_hsl(
        (h + hue) % 360,
        clamp(s + saturation, 0.0, 1.0),
        clamp(l + lightness, 0.0, 1.0),
        color.a,
    )


def _lightness_function(sign: int) -> ColorFunction:
    def _apply(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
        color = _color_arg(args, 0)
        amount = _number_arg(args, 1, keywords, "amount")
        if color is None or amount is None:
            return None
        return _shift_hsl(color, lightness=sign * amount.fraction())

    return _apply


def _saturation_function(sign: int) -> ColorFunction:
    def _apply(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
        color = _color_arg(args, 0)
        amount = _number_arg(args, 1, keywords, "amount")
        if color is None or amount is None:
            return None
        return _shift_hsl(color, saturation=sign * amount.fraction())

    return _apply


def _opacity_function(sign: int) -> ColorFunction:
    def _apply(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
        color = _color_arg(args, 0)
        amount = _number_arg(args, 1, keywords, "amount")
        if color is None or amount is None:
            return None
        alpha = clamp(color.a + sign * amount.alpha(), 0.0, 1.0)
        return ResolvedColor(color.r, color.g, color.b, alpha)

    return _apply


def adjust_hue(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    degrees = _number_arg(args, 1, keywords, "degrees")
    if color is None or degrees is None:
        return None
    return _shift_hsl(color, hue=degrees.value)


def complement(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None
    return _shift_hsl(color, hue=180)


def grayscale(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None
    return _shift_hsl(color, saturation=-1.0)


def invert(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None
    weight_arg = _number_arg(args, 1, keywords, "weight")
    weight = weight_arg.fraction() if weight_arg is not None else 1.0
    inverted = ResolvedColor(255 - color.r, 255 - color.g, 255 - color.b, color.a)
    return _blend(inverted, color, weight)


def mix(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    first = _color_arg(args, 0)
    second = _color_arg(args, 1)
    if first is None or second is None:
        return None
    weight_arg = _number_arg(args, 2, keywords, "weight")
    weight = weight_arg.fraction() if weight_arg is not None else 0.5
    return _blend(first, second, weight)


def _blend(first: ResolvedColor, second: ResolvedColor, weight: float) -> ResolvedColor:
    weight = clamp(weight, 0.0, 1.0)
    other = 1 - weight
    return ResolvedColor(
        round(first.r * weight + second.r * other),
        round(first.g * weight + second.g * other),
        round(first.b * weight + second.b * other),
        first.a * weight + second.a * other,
    )


def rgb(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is not None:
        # rgba($color, $alpha)
        alpha = _number_arg(args, 1, keywords, "alpha")
        if alpha is None:
            return color if len(args) == 1 else None
        return ResolvedColor(color.r, color.g, color.b, clamp(alpha.alpha(), 0.0, 1.0))

    numbers = [arg for arg in args if isinstance(arg, Number)]
    if len(numbers) != len(args) or len(numbers) not in (3, 4):
        return None
    channels = [
        clamp(number.value * 255 / 100 if number.unit == "%" else number.value, 0, 255)
        for number in numbers[:3]
    ]
    alpha_value = clamp(numbers[3].alpha(), 0.0, 1.0) if len(numbers) == 4 else 1.0
    return ResolvedColor(round(channels[0]), round(channels[1]), round(channels[2]), alpha_value)


def hsl(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    numbers = [arg for arg in args if isinstance(arg, Number)]
    if len(numbers) != len(args) or len(numbers) not in (3, 4):
        return None
    hue, saturation, lightness = numbers[:3]
    alpha_value = clamp(numbers[3].alpha(), 0.0, 1.0) if len(numbers) == 4 else 1.0
    return from_hsl(hue.value, saturation.value / 100, lightness.value / 100, alpha_value)


def adjust_color(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None
    r, g, b, a = color.r, color.g, color.b, color.a
    for channel in ("red", "green", "blue"):
        delta = _number_arg((), 0, keywords, channel)
        if delta is None:
            continue
        if channel == "red":
            r = clamp(r + delta.value, 0, 255)
        elif channel == "green":
            g = clamp(g + delta.value, 0, 255)
        else:
            b = clamp(b + delta.value, 0, 255)
    result = ResolvedColor(r, g, b, a)

    hue = _number_arg((), 0, keywords, "hue")
    saturation = _number_arg((), 0, keywords, "saturation")
    lightness = _number_arg((), 0, keywords, "lightness")
    if hue or saturation or lightness:
        result = _shift_hsl(
            result,
            hue=hue.value if hue else 0.0,
            saturation=saturation.value / 100 if saturation else 0.0,
            lightness=lightness.value / 100 if lightness else 0.0,
        )

    alpha = _number_arg((), 0, keywords, "alpha")
    if alpha is not None:
        result = ResolvedColor(result.r, result.g, result.b, clamp(result.a + alpha.value, 0.0, 1.0))
    return result


def scale_color(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None

    def _scale(current: float, upper: float, scale: Number | None) -> float:
        if scale is None:
            return current
        pct = scale.value / 100
        if pct > 0:
            return current + (upper - current) * pct
        return current + current * pct

    r = _scale(color.r, 255, _number_arg((), 0, keywords, "red"))
    g = _scale(color.g, 255, _number_arg((), 0, keywords, "green"))
    b = _scale(color.b, 255, _number_arg((), 0, keywords, "blue"))
    result = ResolvedColor(round(r), round(g), round(b), color.a)

    saturation = _number_arg((), 0, keywords, "saturation")
    lightness = _number_arg((), 0, keywords, "lightness")
    if saturation or lightness:
        h, s, l = to_hsl(result)
        result = from_hsl(h, _scale(s, 1.0, saturation), _scale(l, 1.0, lightness), result.a)

    alpha = _number_arg((), 0, keywords, "alpha")
    if alpha is not None:
        result = ResolvedColor(result.r, result.g, result.b, clamp(_scale(result.a, 1.0, alpha), 0.0, 1.0))
    return result


def change_color(args: Sequence[Value], keywords: Mapping[str, Value]) -> Optional[ResolvedColor]:
    color = _color_arg(args, 0)
    if color is None:
        return None
    red = _number_arg((), 0, keywords, "red")
    green = _number_arg((), 0, keywords, "green")
    blue = _number_arg((), 0, keywords, "blue")
    result = ResolvedColor(
        clamp(red.value, 0, 255) if red else color.r,
        clamp(green.value, 0, 255) if green else color.g,
        clamp(blue.value, 0, 255) if blue else color.b,
        color.a,
    )

    hue = _number_arg((), 0, keywords, "hue")
    saturation = _number_arg((), 0, keywords, "saturation")
    lightness = _number_arg((), 0, keywords, "lightness")
    if hue or saturation or lightness:
        h, s, l = to_hsl(result)
        result = from_hsl(
            hue.value if hue else h,
            saturation.value / 100 if saturation else s,
            lightness.value / 100 if lightness else l,
            result.a,
        )

    alpha = _number_arg((), 0, keywords, "alpha")
    if alpha is not None:
        result = ResolvedColor(result.r, result.g, result.b, clamp(alpha.alpha(), 0.0, 1.0))
    return result


COLOR_FUNCTIONS: Dict[str, ColorFunction] = {
    "lighten": _lightness_function(1),
    "darken": _lightness_function(-1),
    "saturate": _saturation_function(1),
    "desaturate": _saturation_function(-1),
    "adjust-hue": adjust_hue,
    "adjusthue": adjust_hue,
    "complement": complement,
    "invert": invert,
    "mix": mix,
    "rgb": rgb,
    "rgba": rgb,
    "hsl": hsl,
    "hsla": hsl,
    "transparentize": _opacity_function(-1),
    "fade-out": _opacity_function(-1),
    "fadeout": _opacity_function(-1),
    "opacify": _opacity_function(1),
    "fade-in": _opacity_function(1),
    "fadein": _opacity_function(1),
    "grayscale": grayscale,
    "greyscale": grayscale,
    "adjust-color": adjust_color,
    "adjust": adjust_color,
    "scale-color": scale_color,
    "scale": scale_color,
    "change-color": change_color,
    "change": change_color,
}


def canonical_name(name: str) -> str:
    """Drop a module namespace: ``color.mix`` -> ``mix``."""
    name = name.lower()
    if name.startswith("color."):
        return name[len("color."):]
    return name


def is_color_function(name: str) -> bool:
    return canonical_name(name) in COLOR_FUNCTIONS


def apply_color_function(
    name: str,
    args: List[Value],
    keywords: Mapping[str, Value] | None = None,
) -> Optional[ResolvedColor]:
    """Apply ``name`` to already-resolved arguments. ``None`` when it does not apply."""
    function = COLOR_FUNCTIONS.get(canonical_name(name))
    if function is None:
        return None
    return function(args, keywords or {})


__all__ = [
    "COLOR_FUNCTIONS",
    "Number",
    "Value",
    "apply_color_function",
    "canonical_name",
    "is_color_function",
    "parse_number",
]
