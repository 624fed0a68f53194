"""Tolerant element scanner for component templates and HTML pages.

Built on :mod:`html.parser`. It keeps attribute names verbatim (lower-cased),
so Angular bindings such as ``[alt]``, ``[attr.aria-label]`` or ``(click)``
survive and checks can treat them as present. Unclosed and void elements are
tolerated; no attempt is made to repair invalid nesting beyond popping to the
nearest matching open tag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Dict, Iterator, List, Optional, Tuple

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


@dataclass
class Element:
    tag: str
    attrs: Dict[str, Optional[str]]
    line: int
    parent: Optional["Element"] = None
    children: List["Element"] = field(default_factory=list)
    _text: List[str] = field(default_factory=list, repr=False)

    @property
    def text(self) -> str:
        """Inner text including descendants, whitespace-collapsed."""
        return " ".join("".join(self._text).split())

    def has(self, *names: str) -> bool:
        """True when any of the attributes (or an Angular binding of them) is present."""
        for name in names:
            for variant in _binding_variants(name):
                if variant in self.attrs:
                    return True
        return False

    def get(self, name: str) -> Optional[str]:
        for variant in _binding_variants(name):
            if variant in self.attrs:
                return self.attrs[variant]
        return None

    def nonempty(self, *names: str) -> bool:
        """True when an attribute is present with a non-blank value (bindings always count)."""
        for name in names:
            for variant in _binding_variants(name):
                if variant not in self.attrs:
                    continue
                value = self.attrs[variant]
                if variant != name or (value is not None and value.strip()):
                    return True
        return False

    def iter_descendants(self) -> Iterator["Element"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def snippet(self) -> str:
        parts = [self.tag]
        for name, value in self.attrs.items():
            parts.append(name if value is None else f'{name}="{value}"')
        return "<" + " ".join(parts) + ">"


def _binding_variants(name: str) -> Tuple[str, ...]:
    return (name, f"[{name}]", f"[attr.{name}]", f"bind-{name}")


@dataclass
class MarkupDocument:
    elements: List[Element]
    style_blocks: List[Tuple[str, int]]

    def find(self, *tags: str) -> List[Element]:
        wanted = {tag.lower() for tag in tags}
        return [element for element in self.elements if element.tag in wanted]

    def with_attribute(self, *names: str) -> List[Element]:
        return [element for element in self.elements if element.has(*names)]


class _ElementCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.elements: List[Element] = []
        self.style_blocks: List[Tuple[str, int]] = []
        self._stack: List[Element] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        element = self._open(tag, attrs)
        if element.tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._open(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index].tag == tag:
                closed = self._stack[index]
                del self._stack[index:]
                if closed.tag == "style":
                    self.style_blocks.append(("".join(closed._text), closed.line))
                return

    def handle_data(self, data: str) -> None:
        for element in self._stack:
            element._text.append(data)

    def _open(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> Element:
        parent = self._stack[-1] if self._stack else None
        attributes: Dict[str, Optional[str]] = {}
        for name, value in attrs:
            attributes.setdefault(name.lower(), value)
        element = Element(tag=tag.lower(), attrs=attributes, line=self.getpos()[0], parent=parent)
        if parent is not None:
            parent.children.append(element)
        self.elements.append(element)
        return element

    def close(self) -> None:
        super().close()
        for element in reversed(self._stack):
            if element.tag == "style":
                self.style_blocks.append(("".join(element._text), element.line))
        self._stack.clear()


def parse_markup(content: str) -> MarkupDocument:
    collector = _ElementCollector()
    collector.feed(content)
    collector.close()
    return MarkupDocument(
        elements=collector.elements,
        style_blocks=sorted(collector.style_blocks, key=lambda block: block[1]),
    )


def extract_style_blocks(content: str) -> List[Tuple[str, int]]:
    """Inline ``<style>`` bodies with the line of their opening tag."""
    return parse_markup(content).style_blocks


__all__ = [
    "Element",
    "MarkupDocument",
    "VOID_ELEMENTS",
    "extract_style_blocks",
    "parse_markup",
]
