"""Exceptions raised by the computation core."""

from __future__ import annotations


class MetricsError(Exception):
    """Error surfaced to the caller of a metrics computation."""


class UnknownPluginError(MetricsError):
    """A plugin name was requested that no registry entry provides."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Unknown plugin(s): {', '.join(names)}")


class SlotConflictError(MetricsError):
    """A plugin was dispatched twice against the same context."""
