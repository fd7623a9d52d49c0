"""Prometheus metrics for chart planning."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

groups_formed_total = Counter(
    "chartgraph_groups_formed_total",
    "Service groups formed, by grouping strategy",
    ["strategy"],
)

cross_chart_edges_total = Counter(
    "chartgraph_cross_chart_edges_total",
    "Distinct cross-chart dependency edges found",
)

circular_dependencies_total = Counter(
    "chartgraph_circular_dependencies_total",
    "Runs rejected because of a circular chart dependency",
)

plan_duration_seconds = Histogram(
    "chartgraph_plan_duration_seconds",
    "Time spent in each planning stage",
    ["stage"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)
