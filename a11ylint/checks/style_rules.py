"""Built-in style-sheet checks.

Colour and size values go through the run's :class:`StyleResolver`, so a
declaration such as ``background: $surface`` is judged by the literal it
resolves to. Declarations that do not resolve are skipped and do not count
towards ``elements_found``.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..models import ContentType, EvaluationResult, Finding, Severity
from ..style.colors import AA_LARGE, AA_NORMAL, ResolvedColor, evaluate_contrast
from ..style.expressions import split_top_level
from ..style.functions import Number
from ..style.resolver import StyleResolver
from ..style.scanner import Declaration, RuleBlock
from .base import CheckContext, CheckDefinition, check

_OUTLINE_REMOVAL = re.compile(r"^(none|0|0px|transparent)$", re.IGNORECASE)
_FOCUS_SELECTOR = re.compile(r":focus(-visible|-within)?\b", re.IGNORECASE)
_BODY_TEXT_SELECTOR = re.compile(
    r"^(body|p|main|section|article|\.(text|content|body|paragraph|description|article))",
    re.IGNORECASE,
)
_BASE_FONT_PX = 16.0


def _resolver(context: CheckContext) -> StyleResolver:
    if context.resolver is not None and context.resolver.table(context.path) is not None:
        return context.resolver
    return StyleResolver.from_sources([context.source_file])


def _style_blocks(context: CheckContext) -> List[RuleBlock]:
    return [block for block in context.blocks() if not block.selector.startswith("@")]


def _to_px(number: Number) -> Optional[float]:
    if number.unit == "px":
        return number.value
    if number.unit in {"rem", "em"}:
        return number.value * _BASE_FONT_PX
    if number.unit == "pt":
        return number.value * 4 / 3
    return None


def _resolve_background(
    resolver: StyleResolver, decl: Declaration, path: str
) -> Optional[ResolvedColor]:
    value = decl.clean_value
    color = resolver.resolve_color(value, path, decl.position)
    if color is not None:
        return color
    if decl.property.lower() != "background" or "gradient" in value or "url(" in value:
        return None
    for token in split_top_level(value, " "):
        color = resolver.resolve_color(token, path, decl.position)
        if color is not None:
            return color
    return None


def _is_large_text(resolver: StyleResolver, block: RuleBlock, path: str) -> bool:
    size_decl = block.last("font-size")
    if size_decl is None:
        return False
    size = resolver.resolve_number(size_decl.clean_value, path, size_decl.position)
    px = _to_px(size) if size is not None else None
    if px is None:
        return False
    weight_decl = block.last("font-weight")
    weight = (weight_decl.clean_value.lower() if weight_decl else "")
    bold = weight in {"bold", "bolder"} or (weight.isdigit() and int(weight) >= 700)
    return px >= 24 or (bold and px >= 18.66)


@check(
    "color-contrast",
    content_type=ContentType.STYLE,
    tier="basic",
    weight=7,
    wcag="1.4.3",
)
def color_contrast(content: str, context: CheckContext) -> EvaluationResult:
    """Text colour and background in the same rule must meet WCAG AA contrast."""
    resolver = _resolver(context)
    findings: List[Finding] = []
    pairs = 0
    for block in _style_blocks(context):
        fg_decl = block.last("color")
        bg_decl = block.last("background-color", "background")
        if fg_decl is None or bg_decl is None:
            continue
        foreground = resolver.resolve_color(fg_decl.clean_value, context.path, fg_decl.position)
        background = _resolve_background(resolver, bg_decl, context.path)
        if foreground is None or background is None:
            continue
        pairs += 1
        large = _is_large_text(resolver, block, context.path)
        threshold = AA_LARGE if large else AA_NORMAL
        result = evaluate_contrast(foreground, background)
        if result.ratio < threshold:
            findings.append(
                context.finding(
                    "color-contrast",
                    Severity.ERROR,
                    f'Low contrast in "{block.selector}": {foreground.to_hex()} on '
                    f"{background.to_hex()} (ratio {result.ratio:.2f}:1, needs {threshold}:1"
                    f"{' for large text' if large else ''})",
                    f"color: {fg_decl.value}; {bg_decl.property}: {bg_decl.value}",
                    fg_decl.line,
                )
            )
    return EvaluationResult(pairs, findings)


@check(
    "prefers-reduced-motion",
    content_type=ContentType.STYLE,
    tier="full",
    weight=5,
    wcag="2.3.3",
)
def prefers_reduced_motion(content: str, context: CheckContext) -> EvaluationResult:
    """Animations and transitions should honour ``prefers-reduced-motion``."""
    blocks = context.blocks()
    motion: List[Declaration] = []
    keyframes = 0
    honours_preference = False
    for block in blocks:
        header = block.selector.lower()
        if header.startswith("@keyframes"):
            keyframes += 1
            continue
        if "prefers-reduced-motion" in header:
            honours_preference = True
            continue
        if any(parent.lower().startswith("@keyframes") for parent in block.parents):
            continue
        for decl in block.find("animation", "animation-name", "transition"):
            if decl.clean_value.lower() in {"none", "0", "0s"}:
                continue
            motion.append(decl)
    elements = len(motion) + keyframes
    if not elements or honours_preference:
        return EvaluationResult(elements, [])

    kinds = []
    if keyframes or any(decl.property.lower().startswith("animation") for decl in motion):
        kinds.append("animations")
    if any(decl.property.lower() == "transition" for decl in motion):
        kinds.append("transitions")
    first = motion[0] if motion else None
    finding = context.finding(
        "prefers-reduced-motion",
        Severity.WARNING,
        f"File uses {' and '.join(kinds)} without a prefers-reduced-motion media query",
        f"{first.property}: {first.value}" if first else "@keyframes",
        first.line if first else None,
    )
    return EvaluationResult(elements, [finding])


def _removes_outline(block: RuleBlock) -> List[Declaration]:
    return [
        decl
        for decl in block.find("outline", "outline-style", "outline-width")
        if _OUTLINE_REMOVAL.match(decl.clean_value)
    ]


def _has_focus_alternative(block: RuleBlock) -> bool:
    for decl in block.declarations:
        name = decl.property.lower()
        value = decl.clean_value.lower()
        if name == "box-shadow" and value != "none":
            return True
        if name in {"border", "border-color", "border-bottom"} and value not in {"none", "0"}:
            return True
        if name in {"background", "background-color", "text-decoration"}:
            return True
    return False


def _is_focus_block(block: RuleBlock) -> bool:
    return bool(_FOCUS_SELECTOR.search(block.selector))


@check(
    "outline-none-without-alternative",
    content_type=ContentType.STYLE,
    tier="material",
    weight=7,
    wcag="2.4.7",
)
def outline_none_without_alternative(content: str, context: CheckContext) -> EvaluationResult:
    """Removing the focus outline requires another visible focus indicator."""
    blocks = _style_blocks(context)
    removals = 0
    findings: List[Finding] = []
    focus_alternative = any(_is_focus_block(block) and _has_focus_alternative(block) for block in blocks)
    for block in blocks:
        removed = _removes_outline(block)
        if not removed:
            continue
        removals += len(removed)
        if _is_focus_block(block):
            if not _has_focus_alternative(block):
                findings.append(
                    context.finding(
                        "outline-none-without-alternative",
                        Severity.ERROR,
                        f'Focus outline removed in "{block.selector}" without an alternative indicator',
                        f"{removed[0].property}: {removed[0].value}",
                        removed[0].line,
                    )
                )
        elif not focus_alternative:
            findings.append(
                context.finding(
                    "outline-none-without-alternative",
                    Severity.WARNING,
                    f'Outline removed in "{block.selector}" and no focus style provides an alternative',
                    f"{removed[0].property}: {removed[0].value}",
                    removed[0].line,
                )
            )
    return EvaluationResult(removals, findings)


@check("small-font-size", content_type=ContentType.STYLE, tier="full", weight=3, wcag="1.4.4")
def small_font_size(content: str, context: CheckContext) -> EvaluationResult:
    """Font sizes below 12px are hard to read."""
    resolver = _resolver(context)
    sizes = 0
    findings: List[Finding] = []
    for block in _style_blocks(context):
        for decl in block.find("font-size"):
            number = resolver.resolve_number(decl.clean_value, context.path, decl.position)
            px = _to_px(number) if number is not None else None
            if px is None:
                continue
            sizes += 1
            if px < 12:
                findings.append(
                    context.finding(
                        "small-font-size",
                        Severity.WARNING,
                        f'Font size {number.value:g}{number.unit} in "{block.selector}" may be too small',
                        f"{decl.property}: {decl.value}",
                        decl.line,
                    )
                )
    return EvaluationResult(sizes, findings)


@check("line-height-tight", content_type=ContentType.STYLE, tier="full", weight=3, wcag="1.4.12")
def line_height_tight(content: str, context: CheckContext) -> EvaluationResult:
    """Body text line-height should be at least 1.2."""
    resolver = _resolver(context)
    heights = 0
    findings: List[Finding] = []
    for block in _style_blocks(context):
        for decl in block.find("line-height"):
            number = resolver.resolve_number(decl.clean_value, context.path, decl.position)
            if number is None or number.unit not in {"", "%"}:
                continue
            heights += 1
            ratio = number.value / 100 if number.unit == "%" else number.value
            if ratio >= 1.2:
                continue
            body_text = bool(_BODY_TEXT_SELECTOR.match(block.selector))
            findings.append(
                context.finding(
                    "line-height-tight",
                    Severity.WARNING if body_text else Severity.INFO,
                    f'Selector "{block.selector}" has tight line-height {number.value:g}{number.unit}',
                    f"{decl.property}: {decl.value}",
                    decl.line,
                )
            )
    return EvaluationResult(heights, findings)


STYLE_CHECKS: tuple[CheckDefinition, ...] = (
    color_contrast,
    prefers_reduced_motion,
    outline_none_without_alternative,
    small_font_size,
    line_height_tight,
)


__all__ = ["STYLE_CHECKS"]
