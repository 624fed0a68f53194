"""HTTP service mode for a11ylint (requires the ``service`` extra)."""
