"""Source discovery: walk a directory into unit-grouped ``SourceFile`` records."""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from .checks.markup import extract_style_blocks
from .config import CONFIG_FILENAME, load_config
from .errors import ConfigError, FileReadError
from .logging import get_logger
from .models import ContentType, Finding, Severity, SourceFile

_LOGGER = get_logger("collector")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".angular",
    ".cache",
    "dist",
    "coverage",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

CONTENT_TYPE_BY_SUFFIX = {
    ".html": ContentType.HTML,
    ".htm": ContentType.HTML,
    ".scss": ContentType.STYLE,
    ".sass": ContentType.STYLE,
    ".css": ContentType.STYLE,
}

_COMPONENT_SUFFIXES = (".ts",)
_COMPONENT_DECORATOR = re.compile(r"@Component\s*\(\s*\{(?P<body>.*?)\}\s*\)", re.DOTALL)
_TEMPLATE_URL = re.compile(r"templateUrl\s*:\s*(['\"`])(?P<url>.+?)\1")
_STYLE_URL = re.compile(r"styleUrl\s*:\s*(['\"`])(?P<url>.+?)\1")
_STYLE_URLS = re.compile(r"styleUrls\s*:\s*\[(?P<urls>[^\]]*)\]", re.DOTALL)
_QUOTED = re.compile(r"(['\"`])(.+?)\1")

READ_ERROR_CHECK_ID = "file-read"


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .a11ylint.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def default_unit_id(rel_path: str) -> str:
    """Directory plus file stem: ``app/home.component.html`` -> ``app/home.component``."""
    directory, name = posixpath.split(rel_path)
    stem = posixpath.splitext(name)[0]
    return posixpath.join(directory, stem) if directory else stem


def component_units(root: Path, rel_paths: Sequence[str]) -> Dict[str, str]:
    """Map template/style paths to the component file that references them."""
    units: Dict[str, str] = {}
    for rel_path in rel_paths:
        if not rel_path.endswith(_COMPONENT_SUFFIXES):
            continue
        try:
            source = (root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        unit_id = default_unit_id(rel_path)
        base_dir = posixpath.dirname(rel_path)
        for decorator in _COMPONENT_DECORATOR.finditer(source):
            body = decorator.group("body")
            urls = [match.group("url") for match in _TEMPLATE_URL.finditer(body)]
            urls.extend(match.group("url") for match in _STYLE_URL.finditer(body))
            for block in _STYLE_URLS.finditer(body):
                urls.extend(match.group(2) for match in _QUOTED.finditer(block.group("urls")))
            for url in urls:
                target = posixpath.normpath(posixpath.join(base_dir, url))
                units.setdefault(target, unit_id)
    return units


@dataclass
class Collection:
    """Discovered sources plus findings for files that could not be read."""

    files: List[SourceFile] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)


class SourceCollector:
    """Walks a directory and produces unit-grouped source files."""

    def __init__(self, exclude_paths: Sequence[str] = (), *, embedded_styles: bool = True) -> None:
        self.exclude_paths = list(exclude_paths)
        self.embedded_styles = embedded_styles

    def collect(self, root: str | Path) -> Collection:
        """Return every markup and style source under ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Scan path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Scan path is not a directory: {root}")

        rules = self._load_ignore_rules(root_path)
        rel_paths = [path.relative_to(root_path).as_posix() for path in _iter_files(root_path, rules)]
        units = component_units(root_path, rel_paths)

        collection = Collection()
        for rel_path in rel_paths:
            content_type = CONTENT_TYPE_BY_SUFFIX.get(posixpath.splitext(rel_path)[1].lower())
            if content_type is None:
                continue
            unit_id = units.get(rel_path) or default_unit_id(rel_path)
            try:
                content = self._read(root_path / rel_path, rel_path)
            except FileReadError as exc:
                _LOGGER.warning("%s", exc)
                collection.findings.append(
                    Finding(
                        check_id=READ_ERROR_CHECK_ID,
                        severity=Severity.INFO,
                        message=str(exc),
                        snippet="",
                        source_file=rel_path,
                    )
                )
                continue

            collection.files.append(SourceFile(rel_path, content, content_type, unit_id))
            if content_type == ContentType.HTML and self.embedded_styles:
                for index, (css, _line) in enumerate(extract_style_blocks(content), start=1):
                    if css.strip():
                        collection.files.append(
                            SourceFile(f"{rel_path}#style-{index}", css, ContentType.STYLE, unit_id)
                        )

        _LOGGER.info(
            "Collected %d sources in %d units under %s",
            len(collection.files),
            len({source.unit_id for source in collection.files}),
            root_path,
        )
        return collection

    def _load_ignore_rules(self, root: Path) -> List[IgnoreRule]:
        rules = _parse_gitignore(root / ".gitignore")
        patterns = list(self.exclude_paths)
        try:
            patterns.extend(load_config(root / CONFIG_FILENAME).exclude_paths)
        except ConfigError:
            pass
        for pattern in patterns:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)
        return rules

    @staticmethod
    def _read(path: Path, rel_path: str) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FileReadError(rel_path, f"not valid UTF-8 ({exc.reason})") from exc
        except OSError as exc:
            raise FileReadError(rel_path, exc.strerror or str(exc)) from exc


__all__ = [
    "Collection",
    "CONTENT_TYPE_BY_SUFFIX",
    "IgnoreRule",
    "READ_ERROR_CHECK_ID",
    "SourceCollector",
    "build_ignore_rule",
    "component_units",
    "default_unit_id",
]
