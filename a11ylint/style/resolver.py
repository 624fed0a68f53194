"""Resolve symbolic style values (variables, custom properties, maps, colour
functions) to concrete values.

A resolver is built once per scan from the run's style files and dependency
graph. Symbol tables and scanned blocks are computed up front; afterwards the
resolver only reads its own state, so one instance is shared by every check
and every worker thread of the run.

Lookup follows last-binding-before-use inside a file, then the file's imports
in reverse import order so later imports shadow earlier ones. Every symbol
dereference counts as one hop; a chain longer than ``max_depth`` hops is
reported as unresolved instead of recursing further.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set, Tuple

from ..errors import ResolutionError
from ..logging import get_logger
from ..models import ContentType, SourceFile
from .colors import ResolvedColor, parse_color
from .expressions import (
    is_map_literal,
    parse_call,
    parse_map_literal,
    split_keyword,
    split_top_level,
    unquote,
)
from .functions import Number, Value, apply_color_function, is_color_function, parse_number
from .scanner import RuleBlock, scan_blocks
from .symbols import CUSTOM_PROPERTY, Binding, StyleSymbolTable, map_entry_name

if TYPE_CHECKING:
    from ..graph import DependencyGraph

MAX_RESOLUTION_DEPTH = 32

_LOGGER = get_logger("style.resolver")

_MAP_GET_NAMES = {"map-get", "map.get"}

_Memo = Dict[Tuple[str, str, Optional[int], int], Optional[Value]]


class StyleResolver:
    """Shared, read-only resolver for one scan run."""

    def __init__(
        self,
        files: Iterable[SourceFile],
        graph: "DependencyGraph | None" = None,
        *,
        max_depth: int = MAX_RESOLUTION_DEPTH,
    ) -> None:
        self.max_depth = max_depth
        self._graph = graph
        self._blocks: Dict[str, List[RuleBlock]] = {}
        self._tables: Dict[str, StyleSymbolTable] = {}
        for source in files:
            if source.content_type != ContentType.STYLE:
                continue
            blocks = scan_blocks(source.content)
            self._blocks[source.path] = blocks
            self._tables[source.path] = StyleSymbolTable.from_blocks(source.path, blocks)
        _LOGGER.debug("Indexed symbols for %d style files", len(self._tables))

    @classmethod
    def from_sources(cls, files: Iterable[SourceFile]) -> "StyleResolver":
        """Build the graph and the resolver in one go (handy for single files)."""
        from ..graph import build_dependency_graph

        files = list(files)
        return cls(files, build_dependency_graph(files))

    def blocks(self, path: str) -> Optional[List[RuleBlock]]:
        return self._blocks.get(path)

    def table(self, path: str) -> Optional[StyleSymbolTable]:
        return self._tables.get(path)

    # ------------------------------------------------------------------
    # Public resolution API
    # ------------------------------------------------------------------
    def resolve_color(
        self, expression: str, path: str, position: Optional[int] = None
    ) -> Optional[ResolvedColor]:
        """Resolve ``expression`` to a colour, or ``None`` when it is unresolved."""
        try:
            value = self.resolve_value_strict(expression, path, position)
        except ResolutionError as exc:
            _LOGGER.debug("Unresolved value %r in %s: %s", expression, path, exc)
            return None
        return value if isinstance(value, ResolvedColor) else None

    def resolve_number(
        self, expression: str, path: str, position: Optional[int] = None
    ) -> Optional[Number]:
        try:
            value = self.resolve_value_strict(expression, path, position)
        except ResolutionError as exc:
            _LOGGER.debug("Unresolved value %r in %s: %s", expression, path, exc)
            return None
        return value if isinstance(value, Number) else None

    def resolve_value_strict(
        self, expression: str, path: str, position: Optional[int] = None
    ) -> Optional[Value]:
        """Like :meth:`resolve_color` but raises ``ResolutionError`` past the depth bound."""
        return self._evaluate(expression, path, position, 0, {})

    def lookup(
        self, name: str, path: str, position: Optional[int] = None
    ) -> Optional[Tuple[Binding, str]]:
        """Find the binding visible for ``name`` at ``position`` in ``path``."""
        return self._lookup(name, path, position, set())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    # Every internal evaluation takes ``memo``, a cache private to one
    # top-level resolution.  Evaluation is a pure function of
    # (expression, path, position, depth), so a symbol referenced many times
    # by the same expression tree is only evaluated once per depth.
    def _lookup(
        self, name: str, path: str, position: Optional[int], seen: Set[str]
    ) -> Optional[Tuple[Binding, str]]:
        if path in seen:
            return None
        seen.add(path)
        table = self._tables.get(path)
        if table is not None:
            binding = table.lookup(name, before=position)
            if binding is not None:
                return binding, path
        if self._graph is None:
            return None
        for imported in reversed(self._graph.imports(path)):
            found = self._lookup(name, imported, None, seen)
            if found is not None:
                return found
        return None

    def _dereference(
        self, name: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[Value]:
        if depth + 1 >= self.max_depth:
            raise ResolutionError(f"'{name}' exceeds {self.max_depth} resolution hops")
        found = self._lookup(name, path, position, set())
        if found is None:
            return None
        binding, owner = found
        return self._evaluate(binding.expression, owner, binding.position, depth + 1, memo)

    def _evaluate(
        self, expression: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[Value]:
        key = (expression, path, position, depth)
        if key in memo:
            return memo[key]
        value = self._evaluate_uncached(expression, path, position, depth, memo)
        memo[key] = value
        return value

    def _evaluate_uncached(
        self, expression: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[Value]:
        text = expression.replace("!important", "").replace("!default", "").strip()
        if not text:
            return None

        literal = parse_color(text)
        if literal is not None:
            return literal
        number = parse_number(text)
        if number is not None:
            return number

        if text.startswith("$") or ".$" in text:
            name = text[text.index("$"):]
            if _is_identifier(name[1:]):
                return self._dereference(name, path, position, depth, memo)
            return None

        call = parse_call(text)
        if call is None:
            return text
        name, inner = call
        if name == "var":
            return self._evaluate_var(inner, path, position, depth, memo)
        if name in _MAP_GET_NAMES:
            return self._evaluate_map_get(inner, path, position, depth, memo)
        if is_color_function(name):
            return self._evaluate_function(name, inner, path, position, depth, memo)
        return None

    def _evaluate_var(
        self, inner: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[Value]:
        name, _, fallback = inner.partition(",")
        name = name.strip()
        if name.startswith("--"):
            # custom properties cascade, so any binding in the file is visible
            found = self._lookup(name, path, None, set())
            if found is not None and found[0].kind == CUSTOM_PROPERTY:
                if depth + 1 >= self.max_depth:
                    raise ResolutionError(f"'{name}' exceeds {self.max_depth} resolution hops")
                binding, owner = found
                value = self._evaluate(
                    binding.expression, owner, binding.position, depth + 1, memo
                )
                if value is not None:
                    return value
        if fallback.strip():
            return self._evaluate(fallback, path, position, depth, memo)
        return None

    def _evaluate_map_get(
        self, inner: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[Value]:
        args = split_top_level(inner)
        if len(args) < 2 or not args[0].startswith("$"):
            return None
        map_name = args[0]
        keys = [self._key(arg, path, position, depth, memo) for arg in args[1:]]
        if any(key is None for key in keys):
            return None
        if depth + 1 >= self.max_depth:
            raise ResolutionError(f"'{map_name}' exceeds {self.max_depth} resolution hops")
        found = self._lookup(map_entry_name(map_name, keys[0]), path, position, set())
        if found is None:
            return None
        binding, owner = found
        expression = binding.expression
        for key in keys[1:]:
            if not is_map_literal(expression):
                return None
            nested = parse_map_literal(expression)
            if key not in nested:
                return None
            expression = nested[key]
        return self._evaluate(expression, owner, binding.position, depth + 1, memo)

    def _key(
        self, argument: str, path: str, position: Optional[int], depth: int, memo: _Memo
    ) -> Optional[str]:
        argument = argument.strip()
        if argument.startswith("$"):
            value = self._dereference(argument, path, position, depth, memo)
            return unquote(value) if isinstance(value, str) else None
        return unquote(argument)

    def _evaluate_function(
        self,
        name: str,
        inner: str,
        path: str,
        position: Optional[int],
        depth: int,
        memo: _Memo,
    ) -> Optional[Value]:
        positional: List[Value] = []
        keywords: Dict[str, Value] = {}
        for argument in split_top_level(inner):
            keyword, raw = split_keyword(argument)
            value = self._evaluate(raw, path, position, depth, memo)
            if value is None:
                return None
            if keyword is None:
                positional.append(value)
            else:
                keywords[keyword] = value
        return apply_color_function(name, positional, keywords)


def _is_identifier(text: str) -> bool:
    return bool(text) and all(char.isalnum() or char in "-_" for char in text)


__all__ = ["MAX_RESOLUTION_DEPTH", "StyleResolver"]
