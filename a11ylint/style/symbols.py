"""Per-file symbol tables for style variables, custom properties and maps."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

from .expressions import is_map_literal, parse_map_literal
from .scanner import RuleBlock, iter_declarations, scan_blocks

VARIABLE = "variable"
CUSTOM_PROPERTY = "custom-property"
MAP = "map"
MAP_ENTRY = "map-entry"


@dataclass(frozen=True)
class Binding:
    """One ``name -> expression`` binding at a document position."""

    name: str
    expression: str
    position: int
    kind: str


def map_entry_name(map_name: str, key: str) -> str:
    return f"{map_name}.{key}"


class StyleSymbolTable:
    """Ordered bindings for one style file; read-only after construction."""

    def __init__(self, path: str, bindings: Sequence[Binding]) -> None:
        self.path = path
        self._bindings = tuple(sorted(bindings, key=lambda binding: binding.position))
        by_name: Dict[str, List[Binding]] = {}
        for binding in self._bindings:
            by_name.setdefault(binding.name, []).append(binding)
        self._by_name = by_name
        self._positions = {
            name: [binding.position for binding in entries]
            for name, entries in by_name.items()
        }

    @classmethod
    def from_source(cls, path: str, content: str) -> "StyleSymbolTable":
        return cls.from_blocks(path, scan_blocks(content))

    @classmethod
    def from_blocks(cls, path: str, blocks: Sequence[RuleBlock]) -> "StyleSymbolTable":
        bindings: List[Binding] = []
        bound: set[str] = set()
        for decl in iter_declarations(blocks):
            name = decl.property
            if name.startswith("$"):
                if "!default" in decl.value and name in bound:
                    continue
                value = decl.clean_value
                bound.add(name)
                if is_map_literal(value):
                    bindings.append(Binding(name, value, decl.position, MAP))
                    for key, item in parse_map_literal(value).items():
                        bindings.append(
                            Binding(map_entry_name(name, key), item, decl.position, MAP_ENTRY)
                        )
                else:
                    bindings.append(Binding(name, value, decl.position, VARIABLE))
            elif name.startswith("--"):
                bindings.append(Binding(name, decl.clean_value, decl.position, CUSTOM_PROPERTY))
        return cls(path, bindings)

    def lookup(self, name: str, before: Optional[int] = None) -> Optional[Binding]:
        """Latest binding of ``name`` strictly before ``before`` (anywhere when ``None``)."""
        entries = self._by_name.get(name)
        if not entries:
            return None
        if before is None:
            return entries[-1]
        index = bisect.bisect_left(self._positions[name], before)
        if index == 0:
            return None
        return entries[index - 1]

    def names(self) -> List[str]:
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)


__all__ = [
    "Binding",
    "CUSTOM_PROPERTY",
    "MAP",
    "MAP_ENTRY",
    "StyleSymbolTable",
    "VARIABLE",
    "map_entry_name",
]
