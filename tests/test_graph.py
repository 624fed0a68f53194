"""Tests for the style dependency graph."""

from __future__ import annotations

from a11ylint.graph import build_dependency_graph, import_targets, resolve_import
from tests._fixtures.source_builder import markup_source, style_source


def test_import_targets_skip_builtin_and_remote_modules() -> None:
    content = """
    @use 'sass:math';
    @use "../styles/vars" as v;
    @import 'mixins', 'typography';
    @import url("https://fonts.example.com/css");
    @forward 'tokens';
    """

    assert import_targets(content) == ["../styles/vars", "mixins", "typography", "tokens"]


def test_resolve_import_candidates() -> None:
    known = {
        "styles/_vars.scss",
        "styles/mixins/_index.scss",
        "styles/plain.css",
        "app/theme.scss",
    }

    assert resolve_import("app/button.scss", "../styles/vars", known) == "styles/_vars.scss"
    assert resolve_import("app/button.scss", "../styles/mixins", known) == "styles/mixins/_index.scss"
    assert resolve_import("app/button.scss", "~styles/plain.css", known) is None
    assert resolve_import("main.scss", "~styles/plain.css", known) == "styles/plain.css"
    assert resolve_import("app/button.scss", "theme", known) == "app/theme.scss"
    assert resolve_import("app/page.html#style-1", "../styles/vars", known) == "styles/_vars.scss"
    assert resolve_import("app/button.scss", "missing", known) is None


def test_build_graph_records_edges_in_import_order() -> None:
    files = [
        style_source("styles/_vars.scss", "$brand: #1a73e8;\n"),
        style_source("styles/mixins/_index.scss", "@use '../vars';\n"),
        style_source(
            "app/button.scss",
            """
            @use '../styles/mixins';
            @use '../styles/vars';
            @use '../styles/unknown';
            """,
        ),
    ]

    graph = build_dependency_graph(files)

    assert graph.nodes == ["app/button.scss", "styles/_vars.scss", "styles/mixins/_index.scss"]
    assert graph.edges == [
        ("app/button.scss", "styles/_vars.scss"),
        ("app/button.scss", "styles/mixins/_index.scss"),
        ("styles/mixins/_index.scss", "styles/_vars.scss"),
    ]
    assert graph.imports("app/button.scss") == ["styles/mixins/_index.scss", "styles/_vars.scss"]
    assert graph.closure("app/button.scss") == {
        "app/button.scss": 0,
        "styles/mixins/_index.scss": 1,
        "styles/_vars.scss": 1,
    }


def test_graph_ignores_markup_and_self_imports() -> None:
    files = [
        style_source("_self.scss", "@import 'self';\n"),
        markup_source("page.html", "<p>hi</p>"),
    ]

    graph = build_dependency_graph(files)

    assert "page.html" not in graph
    assert len(graph) == 1
    assert graph.edges == []
    assert graph.closure("page.html") == {"page.html": 0}


def test_import_cycles_are_kept_and_traversable() -> None:
    files = [
        style_source("_a.scss", "@import 'b';\n"),
        style_source("_b.scss", "@import 'a';\n"),
    ]

    graph = build_dependency_graph(files)

    assert graph.closure("_a.scss") == {"_a.scss": 0, "_b.scss": 1}
    assert graph.closure("_b.scss") == {"_b.scss": 0, "_a.scss": 1}
