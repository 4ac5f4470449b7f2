"""Round-trip slip trading across exchanges."""

__version__ = "0.1.0"
