"""Resource grouping: partition a resource graph into per-chart service groups."""

from chartgraph.grouping.components import DisjointSet, connected_components
from chartgraph.grouping.engine import group_resources, identity_label

__all__ = [
    "DisjointSet",
    "connected_components",
    "group_resources",
    "identity_label",
]
