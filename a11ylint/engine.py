"""Scan pipeline: select checks, build graph and resolver, run, collapse, score."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .checks import CheckDefinition, CheckRegistry, load_registry
from .collapse import collapse
from .collector import SourceCollector, default_unit_id
from .graph import build_dependency_graph
from .logging import get_logger, log_stage
from .models import (
    CollapsedIssue,
    ContentType,
    Finding,
    Issue,
    ScanReport,
    Severity,
    SourceFile,
    UnitReport,
)
from .runner import ExecutionRunner, Parallelism
from .scoring import build_distribution, score_unit
from .style.resolver import StyleResolver


@dataclass
class ScanOptions:
    """Per-invocation choices. ``check`` overrides ``tier`` when set."""

    tier: str = "full"
    check: Optional[str] = None
    workers: Parallelism = "sequential"
    collapse: bool = True
    check_timeout: Optional[float] = 30.0

    @property
    def selection(self) -> str:
        return self.check or self.tier


class ScanEngine:
    """Coordinates a scan from discovered sources to a scored report."""

    def __init__(
        self,
        registry: CheckRegistry | None = None,
        runner: ExecutionRunner | None = None,
        collector: SourceCollector | None = None,
    ) -> None:
        self.registry = registry or load_registry()
        self.runner = runner
        self.collector = collector or SourceCollector()
        self.logger = get_logger("engine")

    def select_checks(self, options: ScanOptions) -> List[CheckDefinition]:
        return self.registry.select(options.selection)

    def scan_path(
        self,
        root: str | Path,
        options: ScanOptions | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ScanReport:
        """Collect sources under ``root`` and scan them."""
        options = options or ScanOptions()
        # unknown tiers fail before any file is read
        self.select_checks(options)
        self.logger.info("Starting scan of %s (%s)", root, options.selection)
        collection = self.collector.collect(root)
        return self.scan_sources(
            collection.files, options, findings=collection.findings, cancel_event=cancel_event
        )

    def scan_sources(
        self,
        files: Sequence[SourceFile],
        options: ScanOptions | None = None,
        findings: Sequence[Finding] = (),
        cancel_event: threading.Event | None = None,
    ) -> ScanReport:
        """Scan already-collected sources. ``findings`` are carried into their units."""
        options = options or ScanOptions()
        checks = self.select_checks(options)
        files = list(files)

        style_files = [source for source in files if source.content_type == ContentType.STYLE]
        with log_stage(self.logger, "Dependency graph and symbol index"):
            graph = build_dependency_graph(style_files)
            resolver = StyleResolver(style_files, graph)
        self.logger.debug(
            "Prepared %d style files (%d import edges)", len(style_files), len(graph.edges)
        )

        runner = self.runner or ExecutionRunner(check_timeout=options.check_timeout)
        with log_stage(self.logger, "Check execution"):
            outcome = runner.run(
                files,
                checks,
                parallelism=options.workers,
                resolver=resolver,
                cancel_event=cancel_event,
            )
        for warning in outcome.warnings:
            self.logger.warning("%s", warning)

        unit_files: Dict[str, List[str]] = {}
        path_to_unit: Dict[str, str] = {}
        for source in files:
            unit_files.setdefault(source.unit_id, []).append(source.path)
            path_to_unit[source.path] = source.unit_id

        unit_issues: Dict[str, List[Issue]] = {unit_id: [] for unit_id in unit_files}
        for finding in [*findings, *outcome.findings]:
            unit_id = path_to_unit.get(finding.source_file) or default_unit_id(finding.source_file)
            unit_issues.setdefault(unit_id, []).append(finding)
            unit_files.setdefault(unit_id, [])

        units: List[UnitReport] = []
        for unit_id in sorted(unit_files):
            issues = collapse(unit_issues.get(unit_id, []), graph, enabled=options.collapse)
            report, audits = score_unit(
                unit_id, issues, checks, outcome.elements, files=unit_files[unit_id]
            )
            units.append(
                UnitReport(
                    unit_id=unit_id,
                    files=sorted(unit_files[unit_id]),
                    issues=issues,
                    audits=audits,
                    score=report.score,
                    numerator=report.numerator,
                    denominator=report.denominator,
                )
            )

        distribution = build_distribution(unit.score for unit in units)
        report = ScanReport(
            units=units,
            distribution=distribution,
            tier=options.selection,
            warnings=list(outcome.warnings),
            totals=_totals(units, len(files)),
        )
        self.logger.info(
            "Scan complete: %d units, %d issues (%d passing, %d needs work, %d failing, %d unscored)",
            len(units),
            report.totals["issues"],
            distribution.passing,
            distribution.needs_work,
            distribution.failing,
            distribution.unscored,
        )
        return report


def _totals(units: Sequence[UnitReport], file_count: int) -> Dict[str, int]:
    totals = {"units": len(units), "files": file_count, "issues": 0, "collapsed": 0}
    for severity in Severity:
        totals[severity.value] = 0
    for unit in units:
        for issue in unit.issues:
            totals["issues"] += 1
            totals[issue.severity.value] += 1
            if isinstance(issue, CollapsedIssue):
                totals["collapsed"] += 1
    return totals


__all__ = ["ScanEngine", "ScanOptions"]
