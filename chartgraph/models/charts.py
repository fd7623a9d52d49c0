"""Chart-level structures produced by grouping and dependency analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from chartgraph.models.resources import ProcessedResource, ResourceKey


class GroupingStrategy(StrEnum):
    """Which grouping pass formed a service group."""

    LABEL = "label"
    RELATIONSHIP = "relationship"
    NAMESPACE = "namespace"
    INDIVIDUAL = "individual"


@dataclass(frozen=True)
class ServiceGroup:
    """A named set of resources destined to become one chart.

    ``namespace`` is the namespace shared by every member, or empty when
    members span namespaces or are cluster-scoped.
    """

    name: str
    namespace: str
    resources: tuple[ProcessedResource, ...]
    strategy: GroupingStrategy

    @property
    def keys(self) -> frozenset[ResourceKey]:
        return frozenset(r.key for r in self.resources)

    def __len__(self) -> int:
        return len(self.resources)


@dataclass(frozen=True)
class GroupingResult:
    """Exact partition of a graph's resources into service groups."""

    groups: tuple[ServiceGroup, ...] = ()

    def group_names(self) -> list[str]:
        return [g.name for g in self.groups]

    def find(self, name: str) -> ServiceGroup | None:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def group_of(self, key: ResourceKey) -> ServiceGroup | None:
        """Return the group holding the resource with ``key``, if any."""
        for group in self.groups:
            if any(r.key == key for r in group.resources):
                return group
        return None


@dataclass(frozen=True)
class Dependency:
    """One chart's reliance on another chart."""

    name: str
    version: str
    repository: str
    condition: str = ""


# Group name -> charts it depends on. The implied graph is always acyclic.
ChartDependencyMap = dict[str, list[Dependency]]


@dataclass(frozen=True)
class ChartPlan:
    """Grouping plus validated cross-chart dependencies for one run."""

    grouping: GroupingResult
    dependencies: ChartDependencyMap = field(default_factory=dict, hash=False)
