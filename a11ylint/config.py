"""Configuration loading for a11ylint (.a11ylint.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".a11ylint.yml"


@dataclass
class ScanConfig:
    """Represents the scan settings defined in .a11ylint.yml."""

    root: Path
    tier: str = "full"
    check: Optional[str] = None
    workers: Union[str, int] = "sequential"
    collapse: bool = True
    check_timeout: float = 30.0
    exclude_paths: List[str] = field(default_factory=list)
    fail_under: Optional[int] = None


def load_config(config_path: Path) -> ScanConfig:
    """Load configuration from disk. A missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ScanConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ScanConfig(root=root)
    tier = _as_str(data.get("tier"))
    if tier:
        config.tier = tier
    config.check = _as_str(data.get("check"))

    workers = _as_workers(data.get("workers"))
    if workers is not None:
        config.workers = workers

    collapse = _as_bool(data.get("collapse"))
    if collapse is not None:
        config.collapse = collapse

    timeout = _as_float(data.get("check_timeout"))
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError("check_timeout must be a positive number of seconds")
        config.check_timeout = timeout

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.fail_under = _as_int(data.get("fail_under"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_workers(value: Any) -> Union[str, int, None]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        if value < 1:
            raise ConfigError("workers must be 'sequential', 'auto' or a positive integer")
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered.isdigit() and int(lowered) > 0:
            return int(lowered)
        if lowered in {"sequential", "sync", "auto"}:
            return "sequential" if lowered == "sync" else lowered
        raise ConfigError(f"Unsupported workers value '{value}'")
    return None


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "ScanConfig", "load_config"]
