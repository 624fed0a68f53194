"""Minimal style-sheet scanner: rule blocks, declarations and directives.

This is not a CSS/SCSS grammar. It tracks braces, parentheses, quotes and
interpolation well enough to pull out declarations with their offsets, which
is all the symbol table, dependency graph and style checks need. Comments are
blanked rather than removed so every offset still points into the original
text.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class Declaration:
    """``property: value`` inside a block, or a top-level ``$var: value``."""

    property: str
    value: str
    position: int
    line: int

    @property
    def important(self) -> bool:
        return "!important" in self.value

    @property
    def clean_value(self) -> str:
        value = self.value.replace("!important", "").replace("!default", "")
        return value.replace("!global", "").strip()


@dataclass(frozen=True)
class Directive:
    """An at-rule statement such as ``@use 'theme';``."""

    name: str
    params: str
    position: int
    line: int


@dataclass
class RuleBlock:
    """A ``selector { ... }`` block. The root block has an empty selector."""

    selector: str
    position: int
    line: int
    parents: Tuple[str, ...] = ()
    declarations: List[Declaration] = field(default_factory=list)
    directives: List[Directive] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return not self.selector and not self.parents

    def find(self, *names: str) -> List[Declaration]:
        wanted = {name.lower() for name in names}
        return [decl for decl in self.declarations if decl.property.lower() in wanted]

    def last(self, *names: str) -> Declaration | None:
        matches = self.find(*names)
        return matches[-1] if matches else None

    def within(self, needle: str) -> bool:
        """True when this block or an enclosing header mentions ``needle``."""
        lowered = needle.lower()
        return any(lowered in header.lower() for header in (*self.parents, self.selector))


def strip_comments(content: str) -> str:
    """Blank ``/* */`` and ``//`` comments while preserving offsets and newlines."""
    chars = list(content)
    index = 0
    length = len(content)
    quote: str | None = None
    while index < length:
        char = content[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue
        if char in {"'", '"'}:
            quote = char
            index += 1
            continue
        if content.startswith("/*", index):
            end = content.find("*/", index + 2)
            end = length if end == -1 else end + 2
            _blank(chars, index, end)
            index = end
            continue
        if content.startswith("//", index) and (index == 0 or content[index - 1] != ":"):
            end = content.find("\n", index)
            end = length if end == -1 else end
            _blank(chars, index, end)
            index = end
            continue
        index += 1
    return "".join(chars)


def _blank(chars: List[str], start: int, end: int) -> None:
    for position in range(start, end):
        if chars[position] != "\n":
            chars[position] = " "


class LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, content: str) -> None:
        self._starts = [0]
        for offset, char in enumerate(content):
            if char == "\n":
                self._starts.append(offset + 1)

    def line_of(self, position: int) -> int:
        return bisect.bisect_right(self._starts, position)


def scan_blocks(content: str) -> List[RuleBlock]:
    """Return every rule block (root first, then in source order)."""
    text = strip_comments(content)
    lines = LineIndex(text)
    root = RuleBlock(selector="", position=0, line=1)
    stack: List[RuleBlock] = [root]
    finished: List[RuleBlock] = []

    statement_start = 0
    quote: str | None = None
    paren_depth = 0
    interpolation_depth = 0
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in {"'", '"'}:
            quote = char
        elif char == "#" and index + 1 < length and text[index + 1] == "{":
            interpolation_depth += 1
            index += 2
            continue
        elif interpolation_depth and char == "}":
            interpolation_depth -= 1
        elif interpolation_depth:
            pass
        elif char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth = max(paren_depth - 1, 0)
        elif paren_depth:
            pass
        elif char == "{":
            header, offset = _statement(text, statement_start, index)
            parent = stack[-1]
            parents = parent.parents + ((parent.selector,) if parent.selector else ())
            stack.append(
                RuleBlock(
                    selector=header,
                    position=offset,
                    line=lines.line_of(offset),
                    parents=parents,
                )
            )
            statement_start = index + 1
        elif char == ";":
            _record(stack[-1], text, statement_start, index, lines)
            statement_start = index + 1
        elif char == "}":
            _record(stack[-1], text, statement_start, index, lines)
            statement_start = index + 1
            if len(stack) > 1:
                finished.append(stack.pop())
        index += 1

    _record(stack[-1], text, statement_start, length, lines)
    while len(stack) > 1:
        finished.append(stack.pop())

    finished.sort(key=lambda block: block.position)
    return [root, *finished]


def _statement(text: str, start: int, end: int) -> Tuple[str, int]:
    raw = text[start:end]
    stripped = raw.strip()
    offset = start + (len(raw) - len(raw.lstrip()))
    return " ".join(stripped.split()), offset


def _record(block: RuleBlock, text: str, start: int, end: int, lines: LineIndex) -> None:
    statement, offset = _statement(text, start, end)
    if not statement:
        return
    if statement.startswith("@"):
        name, _, params = statement.partition(" ")
        block.directives.append(
            Directive(name=name[1:].lower(), params=params.strip(), position=offset, line=lines.line_of(offset))
        )
        return
    name, separator, value = statement.partition(":")
    if not separator or not name.strip() or " " in name.strip():
        return
    block.declarations.append(
        Declaration(
            property=name.strip(),
            value=value.strip(),
            position=offset,
            line=lines.line_of(offset),
        )
    )


def iter_declarations(blocks: Sequence[RuleBlock]) -> List[Declaration]:
    """All declarations across blocks, in document order."""
    declarations = [decl for block in blocks for decl in block.declarations]
    declarations.sort(key=lambda decl: decl.position)
    return declarations


__all__ = [
    "Declaration",
    "Directive",
    "LineIndex",
    "RuleBlock",
    "iter_declarations",
    "scan_blocks",
    "strip_comments",
]
