"""Core data models shared across a11ylint components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class Severity(str, Enum):
    """Finding severity. Only ``error`` fails an audit."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class ContentType(str, Enum):
    """Kind of source a check applies to."""

    HTML = "html"
    STYLE = "style"


@dataclass(frozen=True)
class SourceFile:
    """A single analyzed source, grouped into a scoring unit by ``unit_id``."""

    path: str
    content: str
    content_type: ContentType
    unit_id: str


@dataclass(frozen=True)
class Finding:
    """One raw result emitted by a check for a specific file."""

    check_id: str
    severity: Severity
    message: str
    snippet: str
    source_file: str
    line: Optional[int] = None


@dataclass
class EvaluationResult:
    """What a check reports for one file. ``elements_found == 0`` means not applicable."""

    elements_found: int = 0
    findings: List[Finding] = field(default_factory=list)


@dataclass(frozen=True)
class CollapsedIssue:
    """Duplicate findings merged onto the shared style-sheet ancestor they trace to."""

    check_id: str
    severity: Severity
    message: str
    ancestor_file: str
    affected_files: tuple[str, ...]
    count: int


Issue = Union[Finding, CollapsedIssue]


@dataclass(frozen=True)
class AuditResult:
    """Pass/fail evaluation of one check against one scoring unit."""

    check_id: str
    weight: int
    applicable: bool
    passed: bool
    elements_found: int = 0
    errors: int = 0
    warnings: int = 0


@dataclass(frozen=True)
class ScoreReport:
    """Weighted score for a unit. ``score`` is ``None`` when nothing was applicable."""

    unit_id: str
    numerator: int
    denominator: int
    score: Optional[int]


@dataclass
class UnitReport:
    """Issues, audits and score for one analysis unit."""

    unit_id: str
    files: List[str]
    issues: List[Issue]
    audits: List[AuditResult]
    score: Optional[int]
    numerator: int = 0
    denominator: int = 0


@dataclass
class Distribution:
    """Aggregate counts of units per score band."""

    passing: int = 0
    needs_work: int = 0
    failing: int = 0
    unscored: int = 0


@dataclass
class ScanReport:
    """The sole artifact handed to formatters and presentation shells."""

    units: List[UnitReport]
    distribution: Distribution
    tier: str
    warnings: List[str] = field(default_factory=list)
    totals: Dict[str, int] = field(default_factory=dict)


__all__ = [
    "AuditResult",
    "CollapsedIssue",
    "ContentType",
    "Distribution",
    "EvaluationResult",
    "Finding",
    "Issue",
    "ScanReport",
    "ScoreReport",
    "Severity",
    "SourceFile",
    "UnitReport",
]
