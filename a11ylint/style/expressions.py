"""Helpers for splitting style value expressions."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

_CALL_PATTERN = re.compile(r"^([a-zA-Z_][\w.-]*)\(")


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` outside parentheses and quotes."""
    parts: List[str] = []
    depth = 0
    quote: str | None = None
    current: List[str] = []
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in {"'", '"'}:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def parse_call(expression: str) -> Optional[Tuple[str, str]]:
    """Return ``(name, inner)`` when the whole expression is one call ``name(...)``."""
    expression = expression.strip()
    match = _CALL_PATTERN.match(expression)
    if not match or not expression.endswith(")"):
        return None
    depth = 0
    quote: str | None = None
    start = match.end() - 1
    for index in range(start, len(expression)):
        char = expression[index]
        if quote:
            if char == quote:
                quote = None
            continue
        if char in {"'", '"'}:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index != len(expression) - 1:
                return None
    return match.group(1).lower(), expression[start + 1 : -1].strip()


def split_keyword(argument: str) -> Tuple[Optional[str], str]:
    """``$lightness: 10%`` -> ``("lightness", "10%")``; positional -> ``(None, arg)``."""
    match = re.match(r"^\$([\w-]+)\s*:\s*(.+)$", argument.strip(), re.DOTALL)
    if match:
        return match.group(1).lower(), match.group(2).strip()
    return None, argument.strip()


def is_map_literal(value: str) -> bool:
    value = value.strip()
    if not (value.startswith("(") and value.endswith(")")):
        return False
    inner = value[1:-1]
    return any(":" in entry for entry in split_top_level(inner))


def parse_map_literal(value: str) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    inner = value.strip()[1:-1]
    for entry in split_top_level(inner):
        key, separator, item = entry.partition(":")
        if separator and key.strip():
            entries[unquote(key)] = item.strip()
    return entries


__all__ = [
    "is_map_literal",
    "parse_call",
    "parse_map_literal",
    "split_keyword",
    "split_top_level",
    "unquote",
]
