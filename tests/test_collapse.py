"""Tests for shared-ancestor collapsing."""

from __future__ import annotations

import pytest

from a11ylint.collapse import collapse, common_ancestor, message_template
from a11ylint.graph import build_dependency_graph
from a11ylint.models import CollapsedIssue, Finding, Severity
from tests._fixtures.source_builder import style_source

MOTION = "File uses transitions without a prefers-reduced-motion media query"


def _finding(path: str, message: str = MOTION, severity: Severity = Severity.WARNING) -> Finding:
    return Finding("prefers-reduced-motion", severity, message, "", path)


@pytest.fixture
def shared_graph():
    return build_dependency_graph(
        [
            style_source("styles/_motion.scss", "$speed: .2s;\n"),
            style_source("app/one.scss", "@use '../styles/motion';\n.one { transition: opacity .2s; }\n"),
            style_source("app/two.scss", "@use '../styles/motion';\n.two { transition: color .2s; }\n"),
            style_source("app/lonely.scss", ".three { transition: color .2s; }\n"),
        ]
    )


def test_message_template_blanks_instance_values() -> None:
    first = 'Low contrast in ".a": #777777 on #ffffff (ratio 4.48:1, needs 4.5:1)'
    second = 'Low contrast in ".b": #888 on #fafafa (ratio 3.54:1, needs 4.5:1)'

    assert message_template(first) == message_template(second)
    assert message_template(first) == 'Low contrast in "": <color> on <color> (ratio <n>:<n>, needs <n>:<n>)'
    assert message_template("Heading level skipped (h1 to h3)") == "Heading level skipped (h<n> to h<n>)"


def test_findings_sharing_an_import_collapse_onto_it(shared_graph) -> None:
    issues = collapse([_finding("app/one.scss"), _finding("app/two.scss")], shared_graph)

    assert issues == [
        CollapsedIssue(
            check_id="prefers-reduced-motion",
            severity=Severity.WARNING,
            message=MOTION,
            ancestor_file="styles/_motion.scss",
            affected_files=("app/one.scss", "app/two.scss"),
            count=2,
        )
    ]


def test_collapse_keeps_worst_severity(shared_graph) -> None:
    issues = collapse(
        [_finding("app/one.scss"), _finding("app/two.scss", severity=Severity.ERROR)],
        shared_graph,
    )

    assert len(issues) == 1
    assert issues[0].severity == Severity.ERROR


def test_no_shared_ancestor_leaves_findings_untouched(shared_graph) -> None:
    findings = [_finding("app/lonely.scss"), _finding("app/one.scss")]

    assert collapse(findings, shared_graph) == sorted(findings, key=lambda item: item.source_file)


def test_duplicates_within_one_file_are_not_collapsed(shared_graph) -> None:
    findings = [_finding("app/one.scss"), _finding("app/one.scss")]

    assert collapse(findings, shared_graph) == findings


def test_different_messages_do_not_merge(shared_graph) -> None:
    other = "File uses animations without a prefers-reduced-motion media query"
    findings = [_finding("app/one.scss"), _finding("app/two.scss", message=other)]

    assert all(isinstance(issue, Finding) for issue in collapse(findings, shared_graph))


def test_collapse_is_idempotent(shared_graph) -> None:
    findings = [_finding("app/one.scss"), _finding("app/two.scss"), _finding("app/lonely.scss")]

    once = collapse(findings, shared_graph)

    assert collapse(once, shared_graph) == once
    assert sum(isinstance(issue, CollapsedIssue) for issue in once) == 1


def test_disabled_collapse_passes_findings_through(shared_graph) -> None:
    findings = [_finding("app/two.scss"), _finding("app/one.scss")]

    assert collapse(findings, shared_graph, enabled=False) == findings


def test_ancestor_prefers_smallest_worst_case_distance() -> None:
    graph = build_dependency_graph(
        [
            style_source("a.scss", "@use 's';\n@use 't';\n"),
            style_source("b.scss", "@use 't';\n@use 'u';\n"),
            style_source("_s.scss", ""),
            style_source("_t.scss", ""),
            style_source("_u.scss", "@use 's';\n"),
        ]
    )

    assert common_ancestor(["a.scss", "b.scss"], graph) == "_t.scss"


def test_ancestor_ties_break_lexicographically() -> None:
    graph = build_dependency_graph(
        [
            style_source("a.scss", "@use 'y';\n@use 'x';\n"),
            style_source("b.scss", "@use 'x';\n@use 'y';\n"),
            style_source("_x.scss", "@use 'base';\n"),
            style_source("_y.scss", "@use 'base';\n"),
            style_source("_base.scss", ""),
        ]
    )

    assert common_ancestor(["a.scss", "b.scss"], graph) == "_x.scss"
    assert common_ancestor(["a.scss", "c.scss"], graph) is None
