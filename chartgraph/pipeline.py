"""Chart planning pipeline.

Runs the two planning stages in order:  grouping → dependency analysis.

A cancellation signal, when given, is checked before each stage and never
inside one, so a cancelled run never hands back a half-built partition or
dependency map.
"""

from __future__ import annotations

import time
from typing import Protocol

from chartgraph.dependencies.analyzer import detect_cross_chart_deps
from chartgraph.errors import ChartGraphError, RunCancelledError
from chartgraph.grouping.engine import group_resources
from chartgraph.models.charts import ChartPlan
from chartgraph.models.config import ChartGraphConfig
from chartgraph.models.resources import ResourceGraph
from chartgraph.observability.logging import bind_run, get_logger, unbind_run

_logger = get_logger("pipeline")


class CancelSignal(Protocol):
    """Anything with an ``is_set()`` method, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


def _check_cancel(cancel: CancelSignal | None, stage: str) -> None:
    if cancel is not None and cancel.is_set():
        _logger.warning("plan_cancelled", stage=stage)
        raise RunCancelledError(stage)


def plan_charts(
    graph: ResourceGraph | None,
    chart_version: str | None = None,
    config: ChartGraphConfig | None = None,
    cancel: CancelSignal | None = None,
) -> ChartPlan:
    """Group the graph's resources into charts and validate their dependencies.

    ``chart_version`` overrides ``config.chart_version`` when given.

    Raises:
        PartitionError: the graph holds a malformed resource key.
        CircularDependencyError: the charts would depend on each other in a cycle.
        RunCancelledError: ``cancel`` was set before a stage started.
    """
    cfg = config or ChartGraphConfig()
    version = chart_version if chart_version is not None else cfg.chart_version
    resource_count = len(graph.resources) if graph is not None else 0

    bind_run(chart_version=version, resources=resource_count)
    t_start = time.monotonic()
    try:
        _check_cancel(cancel, "grouping")
        grouping = group_resources(graph, cfg.grouping)

        _check_cancel(cancel, "dependencies")
        dependencies = detect_cross_chart_deps(grouping.groups, graph, version, cfg.dependencies)

        _logger.info(
            "plan_complete",
            groups=len(grouping.groups),
            charts_with_deps=len(dependencies),
            duration_ms=round((time.monotonic() - t_start) * 1000.0, 3),
        )
    except ChartGraphError as exc:
        _logger.error("plan_failed", error=str(exc), error_type=type(exc).__name__)
        raise
    finally:
        unbind_run()

    return ChartPlan(grouping=grouping, dependencies=dependencies)
