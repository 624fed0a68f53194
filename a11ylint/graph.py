"""Import dependency graph over style files."""

from __future__ import annotations

import posixpath
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from .logging import get_logger
from .models import ContentType, SourceFile
from .style.scanner import scan_blocks

_LOGGER = get_logger("graph")

IMPORT_DIRECTIVES = ("use", "forward", "import")
STYLE_EXTENSIONS = (".scss", ".sass", ".css")
_QUOTED_PATTERN = re.compile(r"""(['"])(.+?)\1""")


class DependencyGraph:
    """Read-only directed graph; an edge ``A -> B`` means A imports B."""

    def __init__(self, graph: nx.DiGraph) -> None:
        self._graph = nx.freeze(graph)

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    @property
    def nodes(self) -> List[str]:
        return sorted(self._graph.nodes)

    @property
    def edges(self) -> List[Tuple[str, str]]:
        return sorted(self._graph.edges)

    def imports(self, path: str) -> List[str]:
        """Direct imports of ``path`` in source order."""
        if path not in self._graph:
            return []
        successors = self._graph.succ[path]
        return sorted(successors, key=lambda target: successors[target]["order"])

    def closure(self, path: str) -> Dict[str, int]:
        """Every file reachable from ``path`` mapped to its shortest distance (itself at 0)."""
        if path not in self._graph:
            return {path: 0}
        return dict(nx.single_source_shortest_path_length(self._graph, path))

    def __contains__(self, path: object) -> bool:
        return path in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()


def build_dependency_graph(style_files: Iterable[SourceFile]) -> DependencyGraph:
    """Parse ``@use``/``@forward``/``@import`` directives into a dependency graph."""
    files = [item for item in style_files if item.content_type == ContentType.STYLE]
    known = {item.path for item in files}
    graph = nx.DiGraph()
    graph.add_nodes_from(sorted(known))

    dropped = 0
    for source in files:
        order = 0
        for target in import_targets(source.content):
            resolved = resolve_import(source.path, target, known)
            if resolved is None:
                dropped += 1
                continue
            if resolved == source.path or graph.has_edge(source.path, resolved):
                continue
            graph.add_edge(source.path, resolved, order=order)
            order += 1

    _LOGGER.debug(
        "Built dependency graph with %d nodes, %d edges (%d unresolved imports dropped)",
        graph.number_of_nodes(),
        graph.number_of_edges(),
        dropped,
    )
    return DependencyGraph(graph)


def import_targets(content: str) -> List[str]:
    """Quoted targets of import-like directives, in source order."""
    blocks = scan_blocks(content)
    directives = sorted(
        (directive for block in blocks for directive in block.directives),
        key=lambda directive: directive.position,
    )
    targets: List[str] = []
    for directive in directives:
        if directive.name not in IMPORT_DIRECTIVES:
            continue
        for match in _QUOTED_PATTERN.finditer(directive.params):
            target = match.group(2).strip()
            if _is_external(target):
                continue
            targets.append(target)
    return targets


def _is_external(target: str) -> bool:
    lowered = target.lower()
    return (
        lowered.startswith(("sass:", "http:", "https:", "//", "url("))
        or not target
    )


def resolve_import(importer: str, target: str, known: Iterable[str]) -> Optional[str]:
    """Map an import target to a known file path, or ``None`` when it cannot be found."""
    known_set = known if isinstance(known, (set, frozenset)) else set(known)
    base_dir = posixpath.dirname(importer.split("#", 1)[0])
    cleaned = target.lstrip("~")
    for candidate in _candidates(posixpath.join(base_dir, cleaned) if base_dir else cleaned):
        if candidate in known_set:
            return candidate
    return None


def _candidates(joined: str) -> Sequence[str]:
    normalized = posixpath.normpath(joined)
    directory, name = posixpath.split(normalized)
    extension = posixpath.splitext(name)[1]

    def _in_dir(filename: str) -> str:
        return posixpath.join(directory, filename) if directory else filename

    if extension in STYLE_EXTENSIONS:
        return [_in_dir(name), _in_dir(f"_{name}")]

    candidates: List[str] = []
    for ext in STYLE_EXTENSIONS:
        candidates.append(_in_dir(f"{name}{ext}"))
        candidates.append(_in_dir(f"_{name}{ext}"))
    for ext in STYLE_EXTENSIONS:
        candidates.append(posixpath.join(normalized, f"_index{ext}"))
        candidates.append(posixpath.join(normalized, f"index{ext}"))
    return candidates


__all__ = [
    "DependencyGraph",
    "IMPORT_DIRECTIVES",
    "build_dependency_graph",
    "import_targets",
    "resolve_import",
]
