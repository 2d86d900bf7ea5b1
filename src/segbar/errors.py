"""Segbar exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests. Rendering never raises; only configuration does.
"""


class SegbarError(Exception):
    """Base exception for all segbar errors."""


class SegbarConfigError(SegbarError):
    """Raised for invalid configuration (segbar.toml or default segments)."""
