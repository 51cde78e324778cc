"""Single-password session gate for the reporting dashboard."""

__version__ = "1.0.0"
