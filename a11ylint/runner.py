"""Apply checks to source files, sequentially or over a thread pool."""

from __future__ import annotations

import concurrent.futures
import math
import os
import queue
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

from .checks.base import CheckContext, CheckDefinition
from .errors import CheckExecutionError, CheckTimeoutError, ConfigurationError, ScanCancelled
from .logging import get_logger
from .models import EvaluationResult, Finding, Severity, SourceFile

if TYPE_CHECKING:
    from .style.resolver import StyleResolver

_LOGGER = get_logger("runner")

Parallelism = Union[str, int, None]
ElementCounts = Dict[Tuple[str, str], int]

SEQUENTIAL_MODES = {"sequential", "sync", "none"}
_POLL_SECONDS = 0.05


@dataclass
class RunOutcome:
    """Raw findings plus per-(path, check id) element counts."""

    findings: List[Finding] = field(default_factory=list)
    elements: ElementCounts = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "RunOutcome") -> None:
        self.findings.extend(other.findings)
        self.elements.update(other.elements)
        self.warnings.extend(other.warnings)


class _Watchdog:
    """Runs each evaluation on its own daemon thread with a soft deadline.

    A timed-out evaluation cannot be killed. Its thread is abandoned, and
    because it is a daemon it never holds the interpreter open at exit.
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout

    def call(self, check: CheckDefinition, source: SourceFile, context: CheckContext) -> EvaluationResult:
        handoff: "queue.Queue[Tuple[Optional[EvaluationResult], Optional[BaseException]]]" = queue.Queue(maxsize=1)

        def target() -> None:
            try:
                handoff.put((check.evaluate(source.content, context), None))
            except BaseException as exc:  # re-raised on the calling thread
                handoff.put((None, exc))

        thread = threading.Thread(target=target, name=f"a11ylint-check-{check.id}", daemon=True)
        thread.start()
        try:
            result, error = handoff.get(timeout=self.timeout)
        except queue.Empty:
            raise CheckTimeoutError(
                check.id, source.path, f"exceeded {self.timeout:g}s watchdog"
            ) from None
        if error is not None:
            raise error
        return result


class ExecutionRunner:
    """Runs every applicable check against every file and collects raw findings."""

    def __init__(
        self,
        *,
        check_timeout: Optional[float] = 30.0,
        pool_threshold: int = 100,
        files_per_worker: int = 50,
        max_workers: Optional[int] = None,
    ) -> None:
        self.check_timeout = check_timeout
        self.pool_threshold = pool_threshold
        self.files_per_worker = files_per_worker
        self.max_workers = max_workers

    def worker_count(self, file_count: int, parallelism: Parallelism) -> int:
        """Workers to use for ``file_count`` files; ``1`` means run sequentially."""
        if file_count == 0 or parallelism is None:
            return 1
        if isinstance(parallelism, str):
            mode = parallelism.strip().lower()
            if mode in SEQUENTIAL_MODES:
                return 1
            if mode.isdigit():
                parallelism = int(mode)
            elif mode != "auto":
                raise ConfigurationError(
                    f"Unknown parallelism '{parallelism}'. Use 'sequential', 'auto' or a worker count"
                )
        if file_count < self.pool_threshold:
            return 1
        if isinstance(parallelism, int):
            if parallelism < 1:
                raise ConfigurationError("Worker count must be at least 1")
            return max(1, min(parallelism, file_count))
        host = self.max_workers or os.cpu_count() or 1
        return max(1, min(math.ceil(file_count / self.files_per_worker), host))

    def run(
        self,
        files: Sequence[SourceFile],
        checks: Sequence[CheckDefinition],
        parallelism: Parallelism = "sequential",
        resolver: Optional["StyleResolver"] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunOutcome:
        files = list(files)
        checks = list(checks)
        cancel_event = cancel_event or threading.Event()
        workers = self.worker_count(len(files), parallelism)
        _LOGGER.info(
            "Running %d checks over %d files (%s)",
            len(checks),
            len(files),
            "sequential" if workers == 1 else f"{workers} workers",
        )
        if workers == 1:
            return self._process_slice(files, checks, resolver, cancel_event)
        return self._run_pool(files, checks, resolver, cancel_event, workers)

    # ------------------------------------------------------------------
    # Pool mode
    # ------------------------------------------------------------------
    def _run_pool(
        self,
        files: List[SourceFile],
        checks: List[CheckDefinition],
        resolver: Optional["StyleResolver"],
        cancel_event: threading.Event,
        workers: int,
    ) -> RunOutcome:
        slices = _partition(files, workers)
        results: Dict[int, RunOutcome] = {}
        failed: List[int] = []
        warnings: List[str] = []

        try:
            executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=len(slices), thread_name_prefix="a11ylint-worker"
            )
        except RuntimeError as exc:
            message = f"Worker pool unavailable ({exc}); ran all {len(files)} files sequentially"
            _LOGGER.warning(message)
            outcome = self._process_slice(files, checks, resolver, cancel_event)
            outcome.warnings.append(message)
            return outcome

        try:
            futures = {
                executor.submit(self._run_worker, index, chunk, checks, resolver, cancel_event): index
                for index, chunk in enumerate(slices)
            }
            pending = set(futures)
            while pending:
                if cancel_event.is_set():
                    raise ScanCancelled(f"Run cancelled with {len(pending)} worker(s) outstanding")
                done, pending = concurrent.futures.wait(
                    pending,
                    timeout=_POLL_SECONDS,
                    return_when=concurrent.futures.FIRST_COMPLETED,
                )
                for future in done:
                    index = futures[future]
                    try:
                        results[index] = future.result()
                    except ScanCancelled:
                        raise
                    except Exception as exc:
                        _LOGGER.warning("Worker %d failed: %s", index, exc)
                        failed.append(index)
                        warnings.append(
                            f"Worker {index} failed ({exc}); processed its "
                            f"{len(slices[index])} files sequentially"
                        )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for index in sorted(failed):
            results[index] = self._process_slice(slices[index], checks, resolver, cancel_event)

        merged = RunOutcome()
        for index in range(len(slices)):
            merged.merge(results[index])
        merged.warnings.extend(warnings)
        return merged

    def _run_worker(
        self,
        index: int,
        files: List[SourceFile],
        checks: List[CheckDefinition],
        resolver: Optional["StyleResolver"],
        cancel_event: threading.Event,
    ) -> RunOutcome:
        _LOGGER.debug("Worker %d processing %d files", index, len(files))
        return self._process_slice(files, checks, resolver, cancel_event)

    # ------------------------------------------------------------------
    # Per-file work
    # ------------------------------------------------------------------
    def _process_slice(
        self,
        files: Sequence[SourceFile],
        checks: Sequence[CheckDefinition],
        resolver: Optional["StyleResolver"],
        cancel_event: threading.Event,
    ) -> RunOutcome:
        outcome = RunOutcome()
        watchdog = _Watchdog(self.check_timeout) if self.check_timeout else None
        for source in files:
            if cancel_event.is_set():
                raise ScanCancelled("Run cancelled")
            for check in checks:
                if not check.applies_to(source):
                    continue
                self._evaluate(source, check, resolver, watchdog, outcome)
        return outcome

    def _evaluate(
        self,
        source: SourceFile,
        check: CheckDefinition,
        resolver: Optional["StyleResolver"],
        watchdog: Optional[_Watchdog],
        outcome: RunOutcome,
    ) -> None:
        context = CheckContext(source_file=source, resolver=resolver)
        try:
            if watchdog is not None:
                result = watchdog.call(check, source, context)
            else:
                result = check.evaluate(source.content, context)
            if not isinstance(result, EvaluationResult):
                raise CheckExecutionError(
                    check.id, source.path, f"returned {type(result).__name__}, expected EvaluationResult"
                )
        except CheckExecutionError as exc:
            _LOGGER.warning("%s", exc)
            outcome.findings.append(_internal_error(check, source, exc.reason))
            return
        except Exception as exc:
            _LOGGER.warning("Check '%s' raised on %s: %s", check.id, source.path, exc)
            outcome.findings.append(_internal_error(check, source, f"{type(exc).__name__}: {exc}"))
            return

        findings = list(result.findings)
        elements = result.elements_found
        if findings and elements < len(findings):
            elements = len(findings)
        outcome.findings.extend(findings)
        if elements:
            outcome.elements[(source.path, check.id)] = elements


def _internal_error(check: CheckDefinition, source: SourceFile, reason: str) -> Finding:
    return Finding(
        check_id=check.id,
        severity=Severity.INFO,
        message=f"Internal error while running check: {reason}",
        snippet="",
        source_file=source.path,
    )


def _partition(files: List[SourceFile], workers: int) -> List[List[SourceFile]]:
    size = math.ceil(len(files) / workers)
    return [files[start : start + size] for start in range(0, len(files), size)]


__all__ = ["ElementCounts", "ExecutionRunner", "Parallelism", "RunOutcome"]
