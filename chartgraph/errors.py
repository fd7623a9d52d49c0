"""Error taxonomy for chartgraph.

Every error here is fatal for the whole generation run: the computations
are deterministic, so retrying with the same input reproduces the failure.
"""

from __future__ import annotations

from chartgraph.models.resources import ResourceKey


class ChartGraphError(Exception):
    """Base class for all chartgraph errors."""


class PartitionError(ChartGraphError):
    """Raised when the resource graph cannot be partitioned into groups."""

    def __init__(self, message: str, key: ResourceKey | None = None) -> None:
        super().__init__(message)
        self.key = key


class CircularDependencyError(ChartGraphError):
    """Raised when cross-chart dependencies form a cycle.

    ``source -> target`` is the back-edge that closed the cycle.
    """

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"circular dependency detected: {source} -> {target}")
        self.source = source
        self.target = target


class RunCancelledError(ChartGraphError):
    """Raised when a cancellation signal is observed between passes."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"chart planning cancelled before {stage}")
        self.stage = stage
