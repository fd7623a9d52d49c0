"""Cross-Chart Dependency Analyzer.

Turns relationships whose endpoints fall in different service groups into
chart dependencies and rejects dependency graphs that contain a cycle,
since chart packaging can only build a DAG of subcharts.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from enum import IntEnum

from chartgraph.errors import CircularDependencyError
from chartgraph.models.charts import ChartDependencyMap, Dependency, ServiceGroup
from chartgraph.models.config import DependencyConfig
from chartgraph.models.resources import ResourceGraph, ResourceKey
from chartgraph.observability.logging import get_logger
from chartgraph.observability.metrics import (
    circular_dependencies_total,
    cross_chart_edges_total,
    plan_duration_seconds,
)

_logger = get_logger("dependencies.analyzer")

# group name -> names of the groups it depends on
Adjacency = Mapping[str, set[str]]


class _Color(IntEnum):
    WHITE = 0  # unvisited
    GRAY = 1  # on the current DFS path
    BLACK = 2  # fully explored


def build_adjacency(groups: Sequence[ServiceGroup], graph: ResourceGraph | None) -> dict[str, set[str]]:
    """Collect deduplicated cross-group edges implied by the graph's relationships.

    Relationships with an endpoint outside every group, or with both
    endpoints in the same group, are skipped.
    """
    owner: dict[ResourceKey, str] = {}
    for group in groups:
        for resource in group.resources:
            owner[resource.key] = group.name

    adjacency: dict[str, set[str]] = {}
    if graph is None:
        return adjacency
    for rel in graph.relationships:
        from_group = owner.get(rel.source)
        to_group = owner.get(rel.target)
        if from_group is None or to_group is None:
            continue
        if from_group == to_group:
            continue
        adjacency.setdefault(from_group, set()).add(to_group)
    return adjacency


def _walk(adjacency: Adjacency, on_finish: list[str] | None = None) -> tuple[str, str] | None:
    """Three-colour DFS over ``adjacency`` in sorted order.

    Returns the first back-edge found, or None. Finished nodes are appended
    to ``on_finish`` in post-order when it is given.
    """
    color: dict[str, _Color] = {}
    nodes = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    for root in sorted(nodes):
        if color.get(root, _Color.WHITE) != _Color.WHITE:
            continue
        # iterative DFS: stack of (node, remaining neighbours)
        color[root] = _Color.GRAY
        stack: list[tuple[str, list[str]]] = [(root, sorted(adjacency.get(root, ()), reverse=True))]
        while stack:
            node, pending = stack[-1]
            if not pending:
                color[node] = _Color.BLACK
                if on_finish is not None:
                    on_finish.append(node)
                stack.pop()
                continue
            neighbor = pending.pop()
            state = color.get(neighbor, _Color.WHITE)
            if state == _Color.GRAY:
                return (node, neighbor)
            if state == _Color.WHITE:
                color[neighbor] = _Color.GRAY
                stack.append((neighbor, sorted(adjacency.get(neighbor, ()), reverse=True)))
    return None


def find_cycle_edge(adjacency: Adjacency) -> tuple[str, str] | None:
    """Return the back-edge ``(source, target)`` closing the first cycle, or None."""
    return _walk(adjacency)


def detect_cross_chart_deps(
    groups: Sequence[ServiceGroup],
    graph: ResourceGraph | None,
    chart_version: str,
    config: DependencyConfig | None = None,
) -> ChartDependencyMap:
    """Derive per-chart dependencies from cross-group relationships.

    Each dependency is stamped with ``chart_version``; its repository and
    condition come from the templates in ``config``. Keys and dependency
    lists are sorted by name.

    Raises:
        CircularDependencyError: the dependencies form a cycle. The error
            names the first back-edge met when walking groups in sorted order.
    """
    if len(groups) <= 1:
        return {}

    cfg = config or DependencyConfig()
    t_start = time.monotonic()
    adjacency = build_adjacency(groups, graph)

    back_edge = find_cycle_edge(adjacency)
    if back_edge is not None:
        circular_dependencies_total.inc()
        _logger.error("circular_dependency", source=back_edge[0], target=back_edge[1])
        raise CircularDependencyError(*back_edge)

    result: ChartDependencyMap = {}
    edges = 0
    for chart_name in sorted(adjacency):
        result[chart_name] = [
            Dependency(
                name=dep_name,
                version=chart_version,
                repository=cfg.repository_template.format(name=dep_name),
                condition=cfg.condition_template.format(name=dep_name),
            )
            for dep_name in sorted(adjacency[chart_name])
        ]
        edges += len(result[chart_name])

    cross_chart_edges_total.inc(edges)
    elapsed = time.monotonic() - t_start
    plan_duration_seconds.labels(stage="dependencies").observe(elapsed)
    _logger.info(
        "cross_chart_deps_detected",
        groups=len(groups),
        charts_with_deps=len(result),
        edges=edges,
        duration_ms=round(elapsed * 1000.0, 3),
    )
    return result


def install_order(dependencies: ChartDependencyMap, group_names: Sequence[str] = ()) -> list[str]:
    """Order chart names so every chart comes after the charts it depends on.

    ``group_names`` adds charts with no dependency edges; they are placed by
    name like every other root. The map must be acyclic.
    """
    adjacency: dict[str, set[str]] = {name: set() for name in group_names}
    for chart_name, deps in dependencies.items():
        adjacency.setdefault(chart_name, set()).update(dep.name for dep in deps)

    order: list[str] = []
    back_edge = _walk(adjacency, on_finish=order)
    if back_edge is not None:
        raise CircularDependencyError(*back_edge)
    return order
