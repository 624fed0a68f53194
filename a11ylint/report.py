"""Plain renderings of a :class:`ScanReport` for the CLI and the service."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from .models import CollapsedIssue, Issue, ScanReport, UnitReport


def issue_to_dict(issue: Issue) -> Dict[str, Any]:
    if isinstance(issue, CollapsedIssue):
        return {
            "kind": "collapsed",
            "check_id": issue.check_id,
            "severity": issue.severity.value,
            "message": issue.message,
            "ancestor_file": issue.ancestor_file,
            "affected_files": list(issue.affected_files),
            "count": issue.count,
        }
    return {
        "kind": "finding",
        "check_id": issue.check_id,
        "severity": issue.severity.value,
        "message": issue.message,
        "snippet": issue.snippet,
        "source_file": issue.source_file,
        "line": issue.line,
    }


def unit_to_dict(unit: UnitReport) -> Dict[str, Any]:
    return {
        "unit_id": unit.unit_id,
        "files": list(unit.files),
        "score": unit.score,
        "numerator": unit.numerator,
        "denominator": unit.denominator,
        "issues": [issue_to_dict(issue) for issue in unit.issues],
        "audits": [asdict(audit) for audit in unit.audits],
    }


def report_to_dict(report: ScanReport) -> Dict[str, Any]:
    """JSON-ready dictionary with stable key order."""
    return {
        "tier": report.tier,
        "units": [unit_to_dict(unit) for unit in report.units],
        "distribution": asdict(report.distribution),
        "totals": dict(report.totals),
        "warnings": list(report.warnings),
    }


def _format_score(score: int | None) -> str:
    return "n/a" if score is None else f"{score}/100"


def _location(issue: Issue) -> str:
    if isinstance(issue, CollapsedIssue):
        return f"{issue.ancestor_file} (affects {issue.count} in {len(issue.affected_files)} files)"
    if issue.line:
        return f"{issue.source_file}:{issue.line}"
    return issue.source_file


def render_text(report: ScanReport, *, show_passing: bool = False) -> str:
    """Human-readable summary grouped by unit."""
    lines: List[str] = [f"a11ylint report (selection: {report.tier})", ""]
    for unit in report.units:
        if not unit.issues and not show_passing:
            continue
        lines.append(f"{unit.unit_id}  score {_format_score(unit.score)}")
        for issue in unit.issues:
            lines.append(
                f"  [{issue.severity.value}] {issue.check_id}: {issue.message}  ({_location(issue)})"
            )
        lines.append("")

    dist = report.distribution
    lines.append(
        f"Units: {len(report.units)}  passing {dist.passing}  needs work {dist.needs_work}  "
        f"failing {dist.failing}  unscored {dist.unscored}"
    )
    totals = report.totals
    if totals:
        lines.append(
            f"Issues: {totals.get('issues', 0)} "
            f"(errors {totals.get('error', 0)}, warnings {totals.get('warning', 0)}, "
            f"info {totals.get('info', 0)}, collapsed {totals.get('collapsed', 0)})"
        )
    for warning in report.warnings:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines) + "\n"


__all__ = ["issue_to_dict", "render_text", "report_to_dict", "unit_to_dict"]
