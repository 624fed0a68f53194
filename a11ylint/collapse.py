"""Root-cause collapsing: merge duplicate findings onto a shared style ancestor.

Findings are grouped by ``(check id, message template)``. The template blanks
quoted values, colours and numbers, so two files reporting
``Low contrast in ".a": #777777 on #ffffff`` and the same message for ``".b"``
fall into one group. A group that spans two or more files and whose import
closures intersect is replaced by a single :class:`CollapsedIssue` on the most
specific common ancestor.

Ancestor choice among the shared candidates: smallest worst-case distance to
the group's files, then smallest total distance, then the lexicographically
smallest path.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .graph import DependencyGraph
from .logging import get_logger
from .models import CollapsedIssue, Finding, Issue

_LOGGER = get_logger("collapse")

_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
_COLOR = re.compile(r"#[0-9a-fA-F]{3,8}\b|\b(?:rgba?|hsla?)\([^)]*\)", re.IGNORECASE)
_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")

Signature = Tuple[str, str]


def message_template(message: str) -> str:
    """Message with instance-specific values blanked."""
    template = _QUOTED.sub('""', message)
    template = _COLOR.sub("<color>", template)
    template = _NUMBER.sub("<n>", template)
    return " ".join(template.split())


def signature(finding: Finding) -> Signature:
    return finding.check_id, message_template(finding.message)


def common_ancestor(files: Sequence[str], graph: DependencyGraph) -> Optional[str]:
    """Most specific file reachable from every one of ``files``; ``None`` if none is."""
    closures = [graph.closure(path) for path in files]
    shared = set(closures[0])
    for closure in closures[1:]:
        shared &= set(closure)
    if not shared:
        return None

    def _rank(candidate: str) -> Tuple[int, int, str]:
        distances = [closure[candidate] for closure in closures]
        return max(distances), sum(distances), candidate

    return min(shared, key=_rank)


def collapse(issues: Iterable[Issue], graph: DependencyGraph, enabled: bool = True) -> List[Issue]:
    """Merge duplicate findings that trace back to one shared ancestor file."""
    issues = list(issues)
    if not enabled:
        return issues

    result: List[Issue] = []
    groups: Dict[Signature, List[Finding]] = {}
    for issue in issues:
        if isinstance(issue, CollapsedIssue):
            result.append(issue)
        else:
            groups.setdefault(signature(issue), []).append(issue)

    merged = 0
    for members in groups.values():
        files = sorted({finding.source_file for finding in members})
        ancestor = common_ancestor(files, graph) if len(files) > 1 else None
        if ancestor is None:
            result.extend(members)
            continue
        ordered = sorted(members, key=_issue_key)
        worst = min(ordered, key=lambda finding: finding.severity.rank)
        result.append(
            CollapsedIssue(
                check_id=worst.check_id,
                severity=worst.severity,
                message=ordered[0].message,
                ancestor_file=ancestor,
                affected_files=tuple(files),
                count=len(members),
            )
        )
        merged += len(members)

    if merged:
        _LOGGER.debug("Collapsed %d findings into shared-ancestor issues", merged)
    return sorted(result, key=_issue_key)


def _issue_key(issue: Issue) -> Tuple[str, int, str, int, str, str]:
    if isinstance(issue, CollapsedIssue):
        return (issue.ancestor_file, 0, issue.check_id, issue.severity.rank, issue.message, "")
    return (
        issue.source_file,
        issue.line or 0,
        issue.check_id,
        issue.severity.rank,
        issue.message,
        issue.snippet,
    )


__all__ = ["collapse", "common_ancestor", "message_template", "signature"]
