"""Weighted pass/fail scoring per analysis unit."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .checks.base import CheckDefinition
from .models import AuditResult, CollapsedIssue, Distribution, Issue, ScoreReport, Severity

PASSING_THRESHOLD = 90
NEEDS_WORK_THRESHOLD = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _tally(issues: Iterable[Issue]) -> Dict[str, Tuple[int, int]]:
    counts: Dict[str, Tuple[int, int]] = {}
    for issue in issues:
        weight = issue.count if isinstance(issue, CollapsedIssue) else 1
        errors, warnings = counts.get(issue.check_id, (0, 0))
        if issue.severity == Severity.ERROR:
            errors += weight
        elif issue.severity == Severity.WARNING:
            warnings += weight
        counts[issue.check_id] = (errors, warnings)
    return counts


def score_unit(
    unit_id: str,
    issues: Sequence[Issue],
    checks: Sequence[CheckDefinition],
    elements: Mapping[Tuple[str, str], int],
    files: Optional[Iterable[str]] = None,
) -> Tuple[ScoreReport, List[AuditResult]]:
    """Score one unit. ``score`` is ``None`` when no check was applicable."""
    paths = set(files) if files is not None else None
    found: Dict[str, int] = {}
    for (path, check_id), count in elements.items():
        if paths is not None and path not in paths:
            continue
        found[check_id] = found.get(check_id, 0) + count

    tally = _tally(issues)
    audits: List[AuditResult] = []
    numerator = 0
    denominator = 0
    for check in checks:
        elements_found = found.get(check.id, 0)
        errors, warnings = tally.get(check.id, (0, 0))
        applicable = elements_found > 0
        passed = applicable and errors == 0
        if applicable:
            denominator += check.weight
            if passed:
                numerator += check.weight
        audits.append(
            AuditResult(
                check_id=check.id,
                weight=check.weight,
                applicable=applicable,
                passed=passed,
                elements_found=elements_found,
                errors=errors,
                warnings=warnings,
            )
        )

    score = round_half_up(100 * numerator / denominator) if denominator else None
    return ScoreReport(unit_id, numerator, denominator, score), audits


def build_distribution(scores: Iterable[Optional[int]]) -> Distribution:
    distribution = Distribution()
    for score in scores:
        if score is None:
            distribution.unscored += 1
        elif score >= PASSING_THRESHOLD:
            distribution.passing += 1
        elif score >= NEEDS_WORK_THRESHOLD:
            distribution.needs_work += 1
        else:
            distribution.failing += 1
    return distribution


__all__ = [
    "NEEDS_WORK_THRESHOLD",
    "PASSING_THRESHOLD",
    "build_distribution",
    "round_half_up",
    "score_unit",
]
