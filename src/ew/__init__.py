"""ew: local single-user file versioning."""

__version__ = "0.1.0"
