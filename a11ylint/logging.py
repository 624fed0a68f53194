"""Logger hierarchy and handler setup for a11ylint.

Every module logs under ``a11ylint.<name>``. The console shows INFO (DEBUG
with ``--verbose``); a ``--log-file`` always records DEBUG so a scan can be
diagnosed after the fact without re-running it verbosely.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

ROOT_LOGGER = "a11ylint"
CONSOLE_FORMAT = "[a11ylint] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``a11ylint.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is None:
        logger.setLevel(console_level)
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    sink = logging.FileHandler(log_file, encoding="utf-8")
    sink.setLevel(logging.DEBUG)
    sink.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(sink)
    logger.setLevel(logging.DEBUG)
    return logger


@contextmanager
def log_stage(logger: logging.Logger, stage: str) -> Iterator[None]:
    """Log how long the wrapped pipeline stage took, at DEBUG."""
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", stage, time.perf_counter() - started)


__all__ = ["configure_logging", "get_logger", "log_stage"]
