"""Tests for a11ylint.style.resolver."""

from __future__ import annotations

import time

import pytest

from a11ylint.errors import ResolutionError
from a11ylint.style import MAX_RESOLUTION_DEPTH, ResolvedColor, StyleResolver
from a11ylint.style.functions import Number
from tests._fixtures.source_builder import style_source


def _resolver(*sources):
    return StyleResolver.from_sources(sources)


def _chain(length: int) -> str:
    lines = ["$v0: #123456;"]
    lines.extend(f"$v{index}: $v{index - 1};" for index in range(1, length))
    return "\n".join(lines) + "\n"


def test_variable_chain_through_color_function() -> None:
    source = style_source(
        "theme.scss",
        """
        $brand: #1a73e8;
        $primary: $brand;
        $bg: lighten($primary, 10%);
        .x { color: #fff; background: $bg; }
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_color("$bg", "theme.scss") == ResolvedColor(72, 143, 237)
    assert resolver.resolve_color("$primary", "theme.scss") == ResolvedColor(26, 115, 232)


def test_chain_below_depth_bound_resolves() -> None:
    length = MAX_RESOLUTION_DEPTH - 1
    resolver = _resolver(style_source("deep.scss", _chain(length)))

    assert resolver.resolve_color(f"$v{length - 1}", "deep.scss") == ResolvedColor(0x12, 0x34, 0x56)


def test_chain_at_depth_bound_is_unresolved() -> None:
    length = MAX_RESOLUTION_DEPTH
    resolver = _resolver(style_source("deep.scss", _chain(length)))

    assert resolver.resolve_color(f"$v{length - 1}", "deep.scss") is None
    with pytest.raises(ResolutionError):
        resolver.resolve_value_strict(f"$v{length - 1}", "deep.scss")


def test_shared_references_resolve_once_per_call() -> None:
    lines = ["$c0: #336699;"]
    lines.extend(f"$c{index}: mix($c{index - 1}, $c{index - 1});" for index in range(1, 26))
    resolver = _resolver(style_source("doubled.scss", "\n".join(lines) + "\n"))

    started = time.perf_counter()
    color = resolver.resolve_color("$c25", "doubled.scss")
    elapsed = time.perf_counter() - started

    assert color == ResolvedColor(0x33, 0x66, 0x99)
    assert elapsed < 1.0


def test_custom_property_cycle_is_unresolved() -> None:
    source = style_source(
        "cycle.css",
        """
        :root { --a: var(--b); --b: var(--a); }
        .x { color: var(--a); }
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_color("var(--a)", "cycle.css") is None


def test_last_binding_before_use_wins() -> None:
    content = """
    $c: red;
    .a { color: $c; }
    $c: blue;
    .b { color: $c; }
    """
    source = style_source("order.scss", content)
    resolver = _resolver(source)

    first = source.content.index(".a")
    second = source.content.index(".b")
    assert resolver.resolve_color("$c", "order.scss", first) == ResolvedColor(255, 0, 0)
    assert resolver.resolve_color("$c", "order.scss", second) == ResolvedColor(0, 0, 255)


def test_default_flag_keeps_existing_binding() -> None:
    source = style_source(
        "defaults.scss",
        """
        $c: red;
        $c: blue !default;
        $d: blue !default;
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_color("$c", "defaults.scss") == ResolvedColor(255, 0, 0)
    assert resolver.resolve_color("$d", "defaults.scss") == ResolvedColor(0, 0, 255)


def test_custom_property_with_fallback() -> None:
    source = style_source(
        "props.css",
        """
        :root { --brand: #112233; }
        .a { color: var(--brand); }
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_color("var(--brand)", "props.css") == ResolvedColor(17, 34, 51)
    assert resolver.resolve_color("var(--missing, #fff)", "props.css") == ResolvedColor(255, 255, 255)
    assert resolver.resolve_color("var(--missing)", "props.css") is None


def test_map_get_with_nested_keys() -> None:
    source = style_source(
        "maps.scss",
        """
        $palette: (primary: #ff0000, 'accent': #00ff00);
        $theme: (text: (strong: #111111));
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_color("map-get($palette, primary)", "maps.scss") == ResolvedColor(255, 0, 0)
    assert resolver.resolve_color("map.get($palette, 'accent')", "maps.scss") == ResolvedColor(0, 255, 0)
    assert resolver.resolve_color("map-get($theme, text, strong)", "maps.scss") == ResolvedColor(17, 17, 17)
    assert resolver.resolve_color("map-get($palette, missing)", "maps.scss") is None


def test_later_imports_shadow_earlier_ones() -> None:
    first = style_source("_a.scss", "$x: red;\n")
    second = style_source("_b.scss", "$x: blue;\n")
    main = style_source(
        "main.scss",
        """
        @import 'a';
        @import 'b';
        .m { color: $x; }
        """,
    )
    resolver = _resolver(first, second, main)

    assert resolver.resolve_color("$x", "main.scss") == ResolvedColor(0, 0, 255)


def test_namespaced_variable_from_used_module() -> None:
    theme = style_source("styles/_theme.scss", "$brand: #010203;\n")
    button = style_source(
        "app/button.scss",
        """
        @use '../styles/theme';
        .b { color: theme.$brand; }
        """,
    )
    resolver = _resolver(theme, button)

    assert resolver.resolve_color("theme.$brand", "app/button.scss") == ResolvedColor(1, 2, 3)


def test_local_binding_shadows_imports() -> None:
    theme = style_source("_theme.scss", "$brand: #010203;\n")
    local = style_source(
        "local.scss",
        """
        @import 'theme';
        $brand: #ffffff;
        .b { color: $brand; }
        """,
    )
    resolver = _resolver(theme, local)

    assert resolver.resolve_color("$brand", "local.scss") == ResolvedColor(255, 255, 255)


def test_numbers_and_unknown_expressions() -> None:
    source = style_source(
        "type.scss",
        """
        $base: 14px;
        $body: $base;
        """,
    )
    resolver = _resolver(source)

    assert resolver.resolve_number("$body", "type.scss") == Number(14.0, "px")
    assert resolver.resolve_color("$body", "type.scss") is None
    assert resolver.resolve_color("lighten($missing, 10%)", "type.scss") is None
    assert resolver.resolve_color("calc(100% - 2px)", "type.scss") is None
