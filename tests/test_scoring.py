"""Tests for weighted unit scoring."""

from __future__ import annotations

from a11ylint.checks.base import CheckDefinition
from a11ylint.models import CollapsedIssue, ContentType, EvaluationResult, Finding, Severity
from a11ylint.scoring import build_distribution, round_half_up, score_unit


def _noop(content, context):
    return EvaluationResult()


def _check(check_id: str, weight: int) -> CheckDefinition:
    return CheckDefinition(check_id, ContentType.HTML, "basic", weight, _noop)


def _error(check_id: str, path: str = "home.html") -> Finding:
    return Finding(check_id, Severity.ERROR, "broken", "", path)


def test_weighted_score_rounds_to_nearest() -> None:
    checks = [_check("alpha", 10), _check("beta", 10), _check("gamma", 7)]
    elements = {("home.html", "alpha"): 2, ("home.html", "beta"): 3, ("home.html", "gamma"): 1}
    issues = [_error("beta"), _error("beta")]

    report, audits = score_unit("home", issues, checks, elements)

    assert report.numerator == 17
    assert report.denominator == 27
    assert report.score == 63
    assert [audit.passed for audit in audits] == [True, False, True]
    assert audits[1].errors == 2


def test_inapplicable_checks_are_excluded() -> None:
    checks = [_check("alpha", 10), _check("beta", 5)]
    elements = {("home.html", "alpha"): 1}

    report, audits = score_unit("home", [], checks, elements)

    assert report.score == 100
    assert report.denominator == 10
    assert audits[1].applicable is False
    assert audits[1].passed is False


def test_unit_without_applicable_checks_has_no_score() -> None:
    report, audits = score_unit("empty", [], [_check("alpha", 10)], {})

    assert report.score is None
    assert report.denominator == 0
    assert not audits[0].applicable


def test_warnings_do_not_fail_an_audit() -> None:
    checks = [_check("alpha", 10)]
    issues = [Finding("alpha", Severity.WARNING, "meh", "", "home.html")]

    report, audits = score_unit("home", issues, checks, {("home.html", "alpha"): 1})

    assert report.score == 100
    assert audits[0].warnings == 1


def test_collapsed_issue_counts_every_merged_finding() -> None:
    checks = [_check("alpha", 5)]
    issue = CollapsedIssue("alpha", Severity.ERROR, "broken", "_shared.scss", ("a.scss", "b.scss"), 2)

    report, audits = score_unit("unit", [issue], checks, {("a.scss", "alpha"): 1})

    assert report.score == 0
    assert audits[0].errors == 2


def test_elements_are_limited_to_the_unit_files() -> None:
    checks = [_check("alpha", 5)]
    elements = {("other.html", "alpha"): 4}

    report, _ = score_unit("home", [], checks, elements, files=["home.html"])

    assert report.score is None


def test_round_half_up() -> None:
    assert round_half_up(62.5) == 63
    assert round_half_up(62.4999) == 62
    assert round_half_up(0.5) == 1


def test_distribution_bands() -> None:
    distribution = build_distribution([100, 90, 89, 50, 49, 0, None])

    assert distribution.passing == 2
    assert distribution.needs_work == 2
    assert distribution.failing == 2
    assert distribution.unscored == 1
