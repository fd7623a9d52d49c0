"""Resource Grouping Engine.

Partitions a resource graph into service groups, one per prospective
chart. Four passes run in strictly decreasing priority and a resource
claimed by one pass is invisible to the later ones:

1. label         -- identity label value (app.kubernetes.io/name, ...)
2. relationship  -- connected components over relationship edges
3. namespace     -- one group per remaining namespace
4. individual    -- remaining cluster-scoped resources, one group each
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence

from chartgraph.errors import PartitionError
from chartgraph.grouping.components import connected_components
from chartgraph.models.charts import GroupingResult, GroupingStrategy, ServiceGroup
from chartgraph.models.config import GroupingConfig
from chartgraph.models.resources import ProcessedResource, ResourceGraph, ResourceKey
from chartgraph.observability.logging import get_logger
from chartgraph.observability.metrics import groups_formed_total, plan_duration_seconds

_logger = get_logger("grouping.engine")


def identity_label(resource: ProcessedResource, label_keys: Sequence[str]) -> str:
    """Return the group-defining label value of ``resource``, or "".

    Keys are tried in order and the first one present with a non-empty value
    wins, so a legacy label never overrides the standard one.
    """
    labels = resource.labels
    if not labels:
        return ""
    for label_key in label_keys:
        value = labels.get(label_key, "")
        if value:
            return value
    return ""


def _shared_namespace(resources: Iterable[ProcessedResource]) -> str:
    namespaces = {r.namespace for r in resources}
    return namespaces.pop() if len(namespaces) == 1 else ""


def _component_name(members: Sequence[ProcessedResource]) -> str:
    namespace = _shared_namespace(members)
    if namespace:
        return namespace
    first = min(members, key=lambda r: r.key.sort_key)
    return first.name


class _GroupCollector:
    """Accumulates groups while keeping names unique and tracking claims."""

    def __init__(self) -> None:
        self.groups: list[ServiceGroup] = []
        self.claimed: set[ResourceKey] = set()
        self._names: set[str] = set()

    def _unique(self, base: str) -> str:
        name = base
        suffix = 2
        while name in self._names:
            name = f"{base}-{suffix}"
            suffix += 1
        if name != base:
            _logger.debug("group_name_collision", requested=base, assigned=name)
        self._names.add(name)
        return name

    def add(self, base_name: str, members: Sequence[ProcessedResource], strategy: GroupingStrategy) -> None:
        group = ServiceGroup(
            name=self._unique(base_name),
            namespace=_shared_namespace(members),
            resources=tuple(members),
            strategy=strategy,
        )
        self.groups.append(group)
        self.claimed.update(r.key for r in members)
        groups_formed_total.labels(strategy=strategy.value).inc()


def _validate(graph: ResourceGraph) -> None:
    for key, resource in graph.resources.items():
        if resource.key != key:
            _logger.error("resource_key_mismatch", indexed_as=str(key), resource=str(resource.key))
            raise PartitionError(f"resource {resource.key} is indexed under a different key {key}", key=key)
        if not key.kind or not key.name:
            _logger.error("malformed_resource_key", key=str(key))
            raise PartitionError(f"resource key {key!r} must have a kind and a name", key=key)


def _label_pass(graph: ResourceGraph, collector: _GroupCollector, label_keys: Sequence[str]) -> None:
    by_label: dict[str, list[ProcessedResource]] = {}
    for resource in graph.resources.values():
        value = identity_label(resource, label_keys)
        if value:
            by_label.setdefault(value, []).append(resource)
    for value in sorted(by_label):
        collector.add(value, by_label[value], GroupingStrategy.LABEL)


def _relationship_pass(graph: ResourceGraph, collector: _GroupCollector) -> None:
    unclaimed = [key for key in graph.resources if key not in collector.claimed]
    if not unclaimed or not graph.relationships:
        return
    edges = ((rel.source, rel.target) for rel in graph.relationships)
    components = [[graph.resources[key] for key in comp] for comp in connected_components(unclaimed, edges)]
    components.sort(key=lambda members: min(r.key.sort_key for r in members))
    for members in components:
        collector.add(_component_name(members), members, GroupingStrategy.RELATIONSHIP)


def _namespace_pass(graph: ResourceGraph, collector: _GroupCollector) -> None:
    by_namespace: dict[str, list[ProcessedResource]] = {}
    for key, resource in graph.resources.items():
        if key not in collector.claimed and key.namespace:
            by_namespace.setdefault(key.namespace, []).append(resource)
    for namespace in sorted(by_namespace):
        collector.add(namespace, by_namespace[namespace], GroupingStrategy.NAMESPACE)


def _individual_pass(graph: ResourceGraph, collector: _GroupCollector) -> None:
    leftovers = [r for key, r in graph.resources.items() if key not in collector.claimed]
    for resource in sorted(leftovers, key=lambda r: r.key.sort_key):
        collector.add(resource.name, [resource], GroupingStrategy.INDIVIDUAL)


def group_resources(graph: ResourceGraph | None, config: GroupingConfig | None = None) -> GroupingResult:
    """Partition every resource in ``graph`` into exactly one service group.

    Membership and group order are deterministic for a given graph. Group
    names are unique; when a later pass would reuse an existing name it
    gets a ``-2``, ``-3``, ... suffix.

    Raises:
        PartitionError: a resource key is malformed. No partial result is
            returned.
    """
    if graph is None or not graph.resources:
        return GroupingResult()

    cfg = config or GroupingConfig()
    t_start = time.monotonic()
    _validate(graph)

    collector = _GroupCollector()
    _label_pass(graph, collector, cfg.label_keys)
    _relationship_pass(graph, collector)
    _namespace_pass(graph, collector)
    _individual_pass(graph, collector)

    elapsed = time.monotonic() - t_start
    plan_duration_seconds.labels(stage="grouping").observe(elapsed)

    by_strategy = {s.value: 0 for s in GroupingStrategy}
    for group in collector.groups:
        by_strategy[group.strategy.value] += 1
    _logger.info(
        "grouping_complete",
        resources=len(graph.resources),
        groups=len(collector.groups),
        duration_ms=round(elapsed * 1000.0, 3),
        **by_strategy,
    )
    return GroupingResult(groups=tuple(collector.groups))
