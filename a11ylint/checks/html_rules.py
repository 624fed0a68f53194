"""Built-in markup checks."""

from __future__ import annotations

import re
from collections import Counter
from typing import List

from ..models import ContentType, EvaluationResult, Finding, Severity
from .base import CheckContext, CheckDefinition, check
from .markup import Element, parse_markup

_FILE_NAME_ALT = re.compile(r"^[\w-]+\.(png|jpe?g|gif|svg|webp)$", re.IGNORECASE)
_GENERIC_LINK_TEXT = {"click here", "here", "more", "read more", "link", "learn more"}
_KEYBOARD_EVENTS = re.compile(r"^\((keydown|keyup|keypress)(\.[\w.]+)?\)$")
_NON_INTERACTIVE = frozenset(
    {
        "div", "span", "p", "section", "article", "header", "footer", "main",
        "aside", "nav", "figure", "figcaption", "li", "ul", "ol", "dl", "dt", "dd",
        "table", "tr", "td", "th", "tbody", "thead", "tfoot", "img", "label",
    }
)


def _is_hidden(element: Element) -> bool:
    return (element.get("aria-hidden") or "").lower() == "true" or (
        (element.get("role") or "").lower() in {"presentation", "none"}
    )


def _has_accessible_name(element: Element) -> bool:
    if element.text:
        return True
    if element.nonempty("aria-label", "aria-labelledby", "title"):
        return True
    for child in element.iter_descendants():
        if child.tag == "img" and child.nonempty("alt"):
            return True
        if child.nonempty("aria-label"):
            return True
    return False


@check("image-alt", content_type=ContentType.HTML, tier="basic", weight=10, wcag="1.1.1")
def image_alt(content: str, context: CheckContext) -> EvaluationResult:
    """Images must carry a text alternative."""
    images = parse_markup(content).find("img")
    findings: List[Finding] = []
    for image in images:
        if image.has("alt"):
            alt = image.get("alt")
            if alt and _FILE_NAME_ALT.match(alt.strip()):
                findings.append(
                    context.finding(
                        "image-alt",
                        Severity.WARNING,
                        f'Image alt text "{alt.strip()}" looks like a file name',
                        image.snippet,
                        image.line,
                    )
                )
            continue
        if _is_hidden(image) or image.nonempty("aria-label", "aria-labelledby"):
            continue
        findings.append(
            context.finding(
                "image-alt",
                Severity.ERROR,
                "Image is missing an alt attribute",
                image.snippet,
                image.line,
            )
        )
    return EvaluationResult(len(images), findings)


@check("button-name", content_type=ContentType.HTML, tier="basic", weight=10, wcag="4.1.2")
def button_name(content: str, context: CheckContext) -> EvaluationResult:
    """Buttons must have an accessible name."""
    document = parse_markup(content)
    buttons = [
        element
        for element in document.elements
        if element.tag == "button"
        or (element.get("role") or "").lower() == "button"
        or (
            element.tag == "input"
            and (element.get("type") or "").lower() in {"button", "submit", "reset"}
        )
    ]
    findings: List[Finding] = []
    for button in buttons:
        if _is_hidden(button):
            continue
        if button.tag == "input":
            named = button.nonempty("value", "aria-label", "aria-labelledby", "title")
            # submit/reset inputs get a default label from the browser
            named = named or (button.get("type") or "").lower() in {"submit", "reset"}
        else:
            named = _has_accessible_name(button)
        if not named:
            findings.append(
                context.finding(
                    "button-name",
                    Severity.ERROR,
                    "Button has no accessible name",
                    button.snippet,
                    button.line,
                )
            )
    return EvaluationResult(len(buttons), findings)


@check("link-name", content_type=ContentType.HTML, tier="basic", weight=10, wcag="2.4.4")
def link_name(content: str, context: CheckContext) -> EvaluationResult:
    """Links must have discernible, descriptive text."""
    links = [
        element
        for element in parse_markup(content).find("a")
        if element.has("href", "routerlink")
    ]
    findings: List[Finding] = []
    for link in links:
        if _is_hidden(link):
            continue
        if not _has_accessible_name(link):
            findings.append(
                context.finding(
                    "link-name",
                    Severity.ERROR,
                    "Link has no accessible name",
                    link.snippet,
                    link.line,
                )
            )
        elif link.text.lower() in _GENERIC_LINK_TEXT and not link.nonempty("aria-label"):
            findings.append(
                context.finding(
                    "link-name",
                    Severity.WARNING,
                    f'Link text "{link.text}" is not descriptive out of context',
                    link.snippet,
                    link.line,
                )
            )
    return EvaluationResult(len(links), findings)


@check("html-has-lang", content_type=ContentType.HTML, tier="material", weight=7, wcag="3.1.1")
def html_has_lang(content: str, context: CheckContext) -> EvaluationResult:
    """The document element must declare its language."""
    roots = parse_markup(content).find("html")
    findings = [
        context.finding(
            "html-has-lang",
            Severity.ERROR,
            "<html> element is missing a lang attribute",
            root.snippet,
            root.line,
        )
        for root in roots
        if not root.nonempty("lang")
    ]
    return EvaluationResult(len(roots), findings)


@check("tabindex", content_type=ContentType.HTML, tier="basic", weight=7, wcag="2.4.3")
def tabindex(content: str, context: CheckContext) -> EvaluationResult:
    """Positive tabindex values disrupt the natural focus order."""
    elements = parse_markup(content).with_attribute("tabindex")
    findings: List[Finding] = []
    for element in elements:
        raw = (element.attrs.get("tabindex") or "").strip()
        try:
            value = int(raw)
        except ValueError:
            continue
        if value > 0:
            findings.append(
                context.finding(
                    "tabindex",
                    Severity.ERROR,
                    f'Positive tabindex "{value}" disrupts the natural tab order',
                    element.snippet,
                    element.line,
                )
            )
    return EvaluationResult(len(elements), findings)


@check("unique-ids", content_type=ContentType.HTML, tier="basic", weight=10, wcag="4.1.1")
def unique_ids(content: str, context: CheckContext) -> EvaluationResult:
    """``id`` attributes must be unique within a document."""
    elements = [element for element in parse_markup(content).elements if "id" in element.attrs]
    counts = Counter((element.attrs["id"] or "").strip() for element in elements)
    findings: List[Finding] = []
    reported: set[str] = set()
    for element in elements:
        identifier = (element.attrs["id"] or "").strip()
        if not identifier:
            findings.append(
                context.finding(
                    "unique-ids",
                    Severity.ERROR,
                    "Empty id attribute",
                    element.snippet,
                    element.line,
                )
            )
        elif "{{" in identifier:
            continue
        elif counts[identifier] > 1 and identifier not in reported:
            reported.add(identifier)
            findings.append(
                context.finding(
                    "unique-ids",
                    Severity.ERROR,
                    f'Duplicate id="{identifier}"',
                    element.snippet,
                    element.line,
                )
            )
    return EvaluationResult(len(elements), findings)


@check("heading-order", content_type=ContentType.HTML, tier="basic", weight=7, wcag="1.3.1")
def heading_order(content: str, context: CheckContext) -> EvaluationResult:
    """Heading levels should only increase by one."""
    headings = parse_markup(content).find("h1", "h2", "h3", "h4", "h5", "h6")
    findings: List[Finding] = []
    previous = 0
    for heading in headings:
        level = int(heading.tag[1])
        if previous and level > previous + 1:
            findings.append(
                context.finding(
                    "heading-order",
                    Severity.ERROR,
                    f"Heading level skipped (h{previous} to h{level})",
                    heading.snippet,
                    heading.line,
                )
            )
        if not heading.text and not heading.nonempty("aria-label"):
            findings.append(
                context.finding(
                    "heading-order",
                    Severity.WARNING,
                    "Heading is empty",
                    heading.snippet,
                    heading.line,
                )
            )
        previous = level
    return EvaluationResult(len(headings), findings)


@check("form-field-label", content_type=ContentType.HTML, tier="basic", weight=10, wcag="1.3.1")
def form_field_label(content: str, context: CheckContext) -> EvaluationResult:
    """Form controls need an associated label."""
    document = parse_markup(content)
    labelled_ids = {
        (label.get("for") or "").strip()
        for label in document.find("label")
        if label.has("for")
    }
    fields = [
        element
        for element in document.find("input", "select", "textarea")
        if (element.get("type") or "").lower()
        not in {"hidden", "submit", "reset", "button", "image"}
    ]
    findings: List[Finding] = []
    for field_element in fields:
        if field_element.nonempty("aria-label", "aria-labelledby", "title"):
            continue
        identifier = (field_element.attrs.get("id") or "").strip()
        if identifier and identifier in labelled_ids:
            continue
        if any(ancestor.tag in {"label", "mat-form-field"} for ancestor in field_element.ancestors()):
            continue
        findings.append(
            context.finding(
                "form-field-label",
                Severity.ERROR,
                f"<{field_element.tag}> has no associated label",
                field_element.snippet,
                field_element.line,
            )
        )
    return EvaluationResult(len(fields), findings)


@check("marquee-blink", content_type=ContentType.HTML, tier="basic", weight=7, wcag="2.2.2")
def marquee_blink(content: str, context: CheckContext) -> EvaluationResult:
    """Deprecated moving-content elements."""
    elements = parse_markup(content).find("marquee", "blink")
    findings = [
        context.finding(
            "marquee-blink",
            Severity.ERROR,
            f"<{element.tag}> creates moving content that cannot be paused",
            element.snippet,
            element.line,
        )
        for element in elements
    ]
    return EvaluationResult(len(elements), findings)


@check(
    "mat-icon-accessibility",
    content_type=ContentType.HTML,
    tier="material",
    weight=7,
    wcag="1.1.1",
)
def mat_icon_accessibility(content: str, context: CheckContext) -> EvaluationResult:
    """Material icons must be hidden from assistive technology or labelled."""
    icons = parse_markup(content).find("mat-icon")
    findings: List[Finding] = []
    for icon in icons:
        if icon.has("aria-hidden") or icon.nonempty("aria-label", "aria-labelledby"):
            continue
        if icon.parent is not None and icon.parent.nonempty("aria-label"):
            continue
        findings.append(
            context.finding(
                "mat-icon-accessibility",
                Severity.ERROR,
                "mat-icon is missing aria-hidden or aria-label",
                icon.snippet,
                icon.line,
            )
        )
    return EvaluationResult(len(icons), findings)


@check(
    "click-without-keyboard",
    content_type=ContentType.HTML,
    tier="material",
    weight=7,
    wcag="2.1.1",
)
def click_without_keyboard(content: str, context: CheckContext) -> EvaluationResult:
    """Non-interactive elements with ``(click)`` need a keyboard handler."""
    clickable = [
        element
        for element in parse_markup(content).elements
        if element.tag in _NON_INTERACTIVE and "(click)" in element.attrs
    ]
    findings: List[Finding] = []
    for element in clickable:
        if any(_KEYBOARD_EVENTS.match(name) for name in element.attrs):
            continue
        findings.append(
            context.finding(
                "click-without-keyboard",
                Severity.ERROR,
                f"(click) on <{element.tag}> has no keyboard equivalent",
                element.snippet,
                element.line,
            )
        )
    return EvaluationResult(len(clickable), findings)


HTML_CHECKS: tuple[CheckDefinition, ...] = (
    image_alt,
    button_name,
    link_name,
    html_has_lang,
    tabindex,
    unique_ids,
    heading_order,
    form_field_label,
    marquee_blink,
    mat_icon_accessibility,
    click_without_keyboard,
)


__all__ = ["HTML_CHECKS"]
