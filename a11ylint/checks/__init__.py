"""Check definitions and the immutable registry that selects them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Tuple

from ..errors import ConfigurationError
from ..logging import get_logger
from ..models import ContentType
from .base import TIERS, CheckContext, CheckDefinition, check, tier_membership
from .html_rules import HTML_CHECKS
from .style_rules import STYLE_CHECKS

_LOGGER = get_logger("checks")

BUILTIN_CHECKS: Tuple[CheckDefinition, ...] = (*HTML_CHECKS, *STYLE_CHECKS)


class CheckRegistry(Mapping):
    """Read-only mapping of check id to definition with precomputed tier partitions."""

    def __init__(self, definitions: Iterable[CheckDefinition]) -> None:
        checks: Dict[str, CheckDefinition] = {}
        for definition in definitions:
            if not isinstance(definition, CheckDefinition):
                raise TypeError(f"Registry entries must be CheckDefinition instances, got {definition!r}")
            if definition.id in checks:
                raise ConfigurationError(f"Duplicate check id '{definition.id}'")
            checks[definition.id] = definition
        self._checks = checks
        self._tiers: Dict[str, Tuple[CheckDefinition, ...]] = {
            tier: tuple(definition for definition in checks.values() if tier in definition.tiers)
            for tier in TIERS
        }

    def __getitem__(self, check_id: str) -> CheckDefinition:
        return self._checks[check_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    @property
    def tiers(self) -> Tuple[str, ...]:
        return TIERS

    def tier(self, name: str) -> Tuple[CheckDefinition, ...]:
        try:
            return self._tiers[name]
        except KeyError:
            raise ConfigurationError(f"Unknown tier '{name}'") from None

    def select(self, name: str) -> List[CheckDefinition]:
        """Checks for a tier name, or the single check with that id (bypassing tiers)."""
        if name in self._tiers:
            return list(self._tiers[name])
        if name in self._checks:
            return [self._checks[name]]
        raise ConfigurationError(
            f"Unknown tier or check id '{name}'. Tiers: {', '.join(TIERS)}"
        )

    def for_content_type(self, content_type: ContentType) -> List[CheckDefinition]:
        return [definition for definition in self._checks.values() if definition.content_type == content_type]


def load_registry(extra: Iterable[CheckDefinition] = ()) -> CheckRegistry:
    """Return the built-in checks plus explicitly registered third-party definitions."""
    registry = CheckRegistry((*BUILTIN_CHECKS, *extra))
    _LOGGER.debug(
        "Loaded %d checks (%s)",
        len(registry),
        ", ".join(f"{tier}={len(registry.tier(tier))}" for tier in TIERS),
    )
    return registry


__all__ = [
    "BUILTIN_CHECKS",
    "CheckContext",
    "CheckDefinition",
    "CheckRegistry",
    "TIERS",
    "check",
    "load_registry",
    "tier_membership",
]
