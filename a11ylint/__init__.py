"""Static accessibility analysis for component markup and style sheets."""

__version__ = "0.4.0"
