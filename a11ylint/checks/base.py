"""Check contract shared by built-in and third-party rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, FrozenSet, List, Optional

from ..errors import ConfigurationError
from ..models import ContentType, EvaluationResult, Finding, Severity, SourceFile
from ..style.scanner import RuleBlock, scan_blocks

if TYPE_CHECKING:
    from ..style.resolver import StyleResolver

TIERS = ("basic", "material", "full")


def tier_membership(tier: str) -> FrozenSet[str]:
    """A check in ``tier`` also belongs to every larger tier (basic < material < full)."""
    if tier not in TIERS:
        raise ConfigurationError(f"Unknown tier '{tier}'. Expected one of: {', '.join(TIERS)}")
    return frozenset(TIERS[TIERS.index(tier):])


@dataclass(frozen=True)
class CheckContext:
    """Per-(file, check) inputs besides the raw content."""

    source_file: SourceFile
    resolver: Optional["StyleResolver"] = None

    @property
    def path(self) -> str:
        return self.source_file.path

    def blocks(self) -> List[RuleBlock]:
        """Scanned rule blocks for a style file, reusing the resolver's copy when present."""
        if self.resolver is not None:
            cached = self.resolver.blocks(self.path)
            if cached is not None:
                return cached
        return scan_blocks(self.source_file.content)

    def finding(
        self,
        check_id: str,
        severity: Severity,
        message: str,
        snippet: str = "",
        line: Optional[int] = None,
    ) -> Finding:
        return Finding(
            check_id=check_id,
            severity=severity,
            message=message,
            snippet=snippet.strip()[:200],
            source_file=self.path,
            line=line,
        )


Evaluate = Callable[[str, CheckContext], EvaluationResult]


@dataclass(frozen=True)
class CheckDefinition:
    """Immutable rule definition. ``evaluate`` must not mutate shared state."""

    id: str
    content_type: ContentType
    tier: str
    weight: int
    evaluate: Evaluate = field(compare=False)
    description: str = ""
    wcag: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ConfigurationError("Check id must not be empty")
        if not 1 <= self.weight <= 10:
            raise ConfigurationError(f"Check '{self.id}' has weight {self.weight}; expected 1..10")
        tier_membership(self.tier)

    @property
    def tiers(self) -> FrozenSet[str]:
        return tier_membership(self.tier)

    def applies_to(self, source: SourceFile) -> bool:
        return source.content_type == self.content_type


def check(
    id: str,
    *,
    content_type: ContentType,
    tier: str,
    weight: int,
    description: str = "",
    wcag: str = "",
) -> Callable[[Evaluate], CheckDefinition]:
    """Decorator turning an evaluate function into a :class:`CheckDefinition`."""

    def _wrap(function: Evaluate) -> CheckDefinition:
        return CheckDefinition(
            id=id,
            content_type=content_type,
            tier=tier,
            weight=weight,
            evaluate=function,
            description=description or _summary(function.__doc__),
            wcag=wcag,
        )

    return _wrap


def _summary(doc: Optional[str]) -> str:
    lines = (doc or "").strip().splitlines()
    return lines[0] if lines else ""


__all__ = [
    "CheckContext",
    "CheckDefinition",
    "Evaluate",
    "TIERS",
    "check",
    "tier_membership",
]
