"""Tests for the built-in markup checks."""

from __future__ import annotations

import pytest

from a11ylint.checks.base import CheckContext
from a11ylint.checks.markup import extract_style_blocks, parse_markup
from a11ylint.models import EvaluationResult, Severity
from tests._fixtures.source_builder import markup_source


def _run(registry, check_id: str, content: str) -> EvaluationResult:
    source = markup_source("app/page.component.html", content)
    return registry[check_id].evaluate(source.content, CheckContext(source))


def _messages(result: EvaluationResult):
    return [(finding.severity, finding.message) for finding in result.findings]


def test_parse_markup_keeps_bindings_and_structure() -> None:
    document = parse_markup(
        """<div (click)="go()"><img [alt]="title" src="a.png"><span>Hi <b>there</b></span></div>"""
    )

    div, image, span, bold = document.elements
    assert div.has("(click)")
    assert image.has("alt") and image.nonempty("alt")
    assert image.parent is div
    assert span.text == "Hi there"
    assert list(bold.ancestors()) == [span, div]


def test_extract_style_blocks_reports_opening_line() -> None:
    content = "<p>x</p>\n<style>\n.a { color: red; }\n</style>\n"

    assert extract_style_blocks(content) == [("\n.a { color: red; }\n", 2)]


def test_image_alt(registry) -> None:
    result = _run(
        registry,
        "image-alt",
        """
        <img src="hero.png">
        <img src="hero.png" alt="">
        <img src="logo.png" alt="logo.png">
        <img [alt]="product.name" [src]="product.image">
        <img src="x.png" aria-hidden="true">
        """,
    )

    assert result.elements_found == 5
    assert _messages(result) == [
        (Severity.ERROR, "Image is missing an alt attribute"),
        (Severity.WARNING, 'Image alt text "logo.png" looks like a file name'),
    ]
    assert result.findings[0].line == 1
    assert result.findings[0].source_file == "app/page.component.html"


def test_button_name(registry) -> None:
    result = _run(
        registry,
        "button-name",
        """
        <button></button>
        <button>Save</button>
        <button aria-label="Close"><mat-icon aria-hidden="true">close</mat-icon></button>
        <button><img src="x.svg"></button>
        <div role="button"></div>
        <input type="submit">
        <input type="button">
        """,
    )

    assert result.elements_found == 7
    assert [finding.line for finding in result.findings] == [1, 4, 5, 7]


def test_link_name(registry) -> None:
    result = _run(
        registry,
        "link-name",
        """
        <a href="/docs"></a>
        <a routerLink="/home">Home</a>
        <a href="/more">click here</a>
        <a>anchor without href</a>
        """,
    )

    assert result.elements_found == 3
    assert _messages(result) == [
        (Severity.ERROR, "Link has no accessible name"),
        (Severity.WARNING, 'Link text "click here" is not descriptive out of context'),
    ]


def test_html_has_lang(registry) -> None:
    missing = _run(registry, "html-has-lang", "<html><body></body></html>")
    present = _run(registry, "html-has-lang", '<html lang="en"><body></body></html>')
    fragment = _run(registry, "html-has-lang", "<p>component template</p>")

    assert len(missing.findings) == 1
    assert present.elements_found == 1 and not present.findings
    assert fragment.elements_found == 0


def test_tabindex(registry) -> None:
    result = _run(
        registry,
        "tabindex",
        '<div tabindex="0"></div><div tabindex="-1"></div><div tabindex="3"></div>',
    )

    assert result.elements_found == 3
    assert _messages(result) == [(Severity.ERROR, 'Positive tabindex "3" disrupts the natural tab order')]


def test_unique_ids(registry) -> None:
    result = _run(
        registry,
        "unique-ids",
        """
        <div id="main"></div>
        <div id="main"></div>
        <div id="main"></div>
        <div id=""></div>
        <div id="{{ item.id }}"></div>
        <div id="{{ item.id }}"></div>
        """,
    )

    assert _messages(result) == [
        (Severity.ERROR, 'Duplicate id="main"'),
        (Severity.ERROR, "Empty id attribute"),
    ]


def test_heading_order(registry) -> None:
    result = _run(registry, "heading-order", "<h1>Title</h1><h3>Skipped</h3><h4></h4><h2>Back</h2>")

    assert result.elements_found == 4
    assert _messages(result) == [
        (Severity.ERROR, "Heading level skipped (h1 to h3)"),
        (Severity.WARNING, "Heading is empty"),
    ]


def test_form_field_label(registry) -> None:
    result = _run(
        registry,
        "form-field-label",
        """
        <label for="email">Email</label><input id="email">
        <label>Name <input></label>
        <mat-form-field><input matInput></mat-form-field>
        <input aria-label="Search">
        <input type="hidden" name="token">
        <select></select>
        <textarea id="notes"></textarea>
        """,
    )

    assert result.elements_found == 6
    assert _messages(result) == [
        (Severity.ERROR, "<select> has no associated label"),
        (Severity.ERROR, "<textarea> has no associated label"),
    ]


def test_marquee_blink(registry) -> None:
    result = _run(registry, "marquee-blink", "<marquee>Sale</marquee><p>calm</p>")

    assert _messages(result) == [
        (Severity.ERROR, "<marquee> creates moving content that cannot be paused")
    ]


def test_mat_icon_accessibility(registry) -> None:
    result = _run(
        registry,
        "mat-icon-accessibility",
        """
        <mat-icon>home</mat-icon>
        <mat-icon aria-hidden="true">star</mat-icon>
        <mat-icon [attr.aria-label]="label">info</mat-icon>
        <button aria-label="Delete"><mat-icon>delete</mat-icon></button>
        """,
    )

    assert result.elements_found == 4
    assert [finding.line for finding in result.findings] == [1]


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ('<div (click)="open()">Open</div>', 1),
        ('<div (click)="open()" (keydown.enter)="open()">Open</div>', 0),
        ('<button (click)="open()">Open</button>', 0),
    ],
)
def test_click_without_keyboard(registry, content: str, expected: int) -> None:
    result = _run(registry, "click-without-keyboard", content)

    assert len(result.findings) == expected
