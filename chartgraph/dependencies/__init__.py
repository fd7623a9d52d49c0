"""Chart dependencies: cross-chart analysis and infrastructure detection."""

from chartgraph.dependencies.analyzer import (
    build_adjacency,
    detect_cross_chart_deps,
    find_cycle_edge,
    install_order,
)
from chartgraph.dependencies.autodeps import (
    detect_common_dependencies,
    filter_existing_dependencies,
)

__all__ = [
    "build_adjacency",
    "detect_common_dependencies",
    "detect_cross_chart_deps",
    "filter_existing_dependencies",
    "find_cycle_edge",
    "install_order",
]
