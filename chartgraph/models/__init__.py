"""Core data structures for chartgraph."""

from chartgraph.models.charts import (
    ChartDependencyMap,
    ChartPlan,
    Dependency,
    GroupingResult,
    GroupingStrategy,
    ServiceGroup,
)
from chartgraph.models.config import (
    ChartGraphConfig,
    DependencyConfig,
    GroupingConfig,
    LogConfig,
)
from chartgraph.models.resources import (
    ProcessedResource,
    Relationship,
    RelationshipType,
    ResourceGraph,
    ResourceKey,
)

__all__ = [
    "ChartDependencyMap",
    "ChartGraphConfig",
    "ChartPlan",
    "Dependency",
    "DependencyConfig",
    "GroupingConfig",
    "GroupingResult",
    "GroupingStrategy",
    "LogConfig",
    "ProcessedResource",
    "Relationship",
    "RelationshipType",
    "ResourceGraph",
    "ResourceKey",
    "ServiceGroup",
]
