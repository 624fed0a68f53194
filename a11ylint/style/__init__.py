"""Style-sheet scanning, symbol resolution and colour math."""

from .colors import ContrastResult, ResolvedColor, contrast_ratio, evaluate_contrast, parse_color
from .resolver import MAX_RESOLUTION_DEPTH, StyleResolver

__all__ = [
    "ContrastResult",
    "MAX_RESOLUTION_DEPTH",
    "ResolvedColor",
    "StyleResolver",
    "contrast_ratio",
    "evaluate_contrast",
    "parse_color",
]
