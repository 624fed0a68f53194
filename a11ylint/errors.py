"""Exception hierarchy shared across a11ylint components."""

from __future__ import annotations


class A11yLintError(RuntimeError):
    """Base class for errors raised by a11ylint."""


class ConfigError(A11yLintError):
    """Raised when the configuration file cannot be parsed."""


class ConfigurationError(A11yLintError):
    """Raised when a requested tier or check id does not exist."""


class FileReadError(A11yLintError):
    """Raised when a source file cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path
        self.reason = reason


class CheckExecutionError(A11yLintError):
    """Raised when a check fails for a single (file, check) pair."""

    def __init__(self, check_id: str, path: str, reason: str) -> None:
        super().__init__(f"Check '{check_id}' failed on {path}: {reason}")
        self.check_id = check_id
        self.path = path
        self.reason = reason


class CheckTimeoutError(CheckExecutionError):
    """Raised when a check exceeds the per-check watchdog bound."""


class ResolutionError(A11yLintError):
    """Raised when a style symbol cannot be resolved to a literal value."""


class WorkerFailure(A11yLintError):
    """Raised when a pool worker fails outright."""


class ScanCancelled(A11yLintError):
    """Raised when a run is aborted before every worker finished."""


class ScanError(A11yLintError):
    """Fatal error: the scan root cannot be read at all."""


__all__ = [
    "A11yLintError",
    "CheckExecutionError",
    "CheckTimeoutError",
    "ConfigError",
    "ConfigurationError",
    "FileReadError",
    "ResolutionError",
    "ScanCancelled",
    "ScanError",
    "WorkerFailure",
]
