"""chartgraph: group extracted Kubernetes resources into Helm charts.

Decides which resources belong in the same chart and whether the resulting
set of charts forms a buildable (acyclic) dependency graph.

Usage::

    from chartgraph import plan_charts

    plan = plan_charts(graph, chart_version="0.1.0")
    for group in plan.grouping.groups:
        ...
"""

__version__ = "0.1.0"

from chartgraph.dependencies import detect_cross_chart_deps
from chartgraph.errors import ChartGraphError, CircularDependencyError, PartitionError, RunCancelledError
from chartgraph.grouping import group_resources
from chartgraph.pipeline import plan_charts

__all__ = [
    "ChartGraphError",
    "CircularDependencyError",
    "PartitionError",
    "RunCancelledError",
    "detect_cross_chart_deps",
    "group_resources",
    "plan_charts",
]
