"""Resource identity, relationship and graph data structures.

Produced by the upstream extraction stage. The grouping and dependency
passes only read these objects.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum


class RelationshipType(StrEnum):
    """How one resource references another."""

    LABEL_SELECTOR = "label_selector"
    NAME_REFERENCE = "name_reference"
    VOLUME_MOUNT = "volume_mount"
    ENV_FROM = "env_from"
    ENV_VALUE_FROM = "env_value_from"
    ANNOTATION = "annotation"
    SERVICE_ACCOUNT = "service_account"
    OWNER_REFERENCE = "owner_reference"
    IMAGE_PULL_SECRET = "image_pull_secret"
    CLUSTER_ROLE_BINDING = "cluster_role_binding"
    ROLE_BINDING = "role_binding"
    PVC = "pvc"
    INGRESS_CLASS = "ingress_class"
    SERVICE_MONITOR = "service_monitor"
    DECKHOUSE = "deckhouse"
    GATEWAY_ROUTE = "gateway_route"
    SCALE_TARGET = "scale_target"
    STORAGE_CLASS = "storage_class"
    CUSTOM_DEPENDENCY = "custom_dependency"


@dataclass(frozen=True)
class ResourceKey:
    """Unique identity of a Kubernetes resource.

    ``group`` is empty for the core API group (v1 ConfigMap, Service, ...).
    ``namespace`` is empty for cluster-scoped resources.
    """

    group: str
    version: str
    kind: str
    namespace: str
    name: str

    @property
    def api_version(self) -> str:
        """Return the apiVersion string, e.g. ``apps/v1`` or ``v1``."""
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def sort_key(self) -> tuple[str, str, str, str, str]:
        """Canonical ordering: kind, then name, then the remaining fields."""
        return (self.kind, self.name, self.namespace, self.group, self.version)

    def __str__(self) -> str:
        if not self.namespace:
            return f"{self.kind}/{self.name}"
        return f"{self.kind}/{self.namespace}/{self.name}"


@dataclass(frozen=True)
class Relationship:
    """A directed reference: ``source`` refers to ``target``."""

    source: ResourceKey
    target: ResourceKey
    type: RelationshipType
    source_field: str = ""  # path of the referencing field in the source object
    details: dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ProcessedResource:
    """A resource after processing.

    ``manifest`` is the raw object and ``values`` the chart values extracted
    by later stages; both are opaque to grouping. Equality and hashing use
    ``key`` only, so two resources are the same iff their keys are equal.
    """

    key: ResourceKey
    labels: dict[str, str] = field(default_factory=dict, compare=False)
    manifest: dict[str, object] = field(default_factory=dict, compare=False)
    values: dict[str, object] = field(default_factory=dict, compare=False)

    @property
    def kind(self) -> str:
        return self.key.kind

    @property
    def namespace(self) -> str:
        return self.key.namespace

    @property
    def name(self) -> str:
        return self.key.name


@dataclass
class ResourceGraph:
    """All resources of one generation run and the relationships between them.

    Assembled once by the extraction stage, then handed to grouping and
    dependency analysis as read-only input.
    """

    resources: dict[ResourceKey, ProcessedResource] = field(default_factory=dict)
    relationships: list[Relationship] = field(default_factory=list)

    @classmethod
    def from_resources(
        cls,
        resources: Iterable[ProcessedResource],
        relationships: Iterable[Relationship] = (),
    ) -> ResourceGraph:
        """Build a graph keyed by each resource's own key.

        A later resource with the same key replaces an earlier one.
        """
        graph = cls()
        for resource in resources:
            graph.add_resource(resource)
        for rel in relationships:
            graph.add_relationship(rel)
        return graph

    def add_resource(self, resource: ProcessedResource) -> None:
        self.resources[resource.key] = resource

    def add_relationship(self, rel: Relationship) -> None:
        self.relationships.append(rel)

    def get(self, key: ResourceKey) -> ProcessedResource | None:
        return self.resources.get(key)

    def relationships_from(self, key: ResourceKey) -> list[Relationship]:
        """Return relationships whose source is ``key``."""
        return [rel for rel in self.relationships if rel.source == key]

    def relationships_to(self, key: ResourceKey) -> list[Relationship]:
        """Return relationships whose target is ``key``."""
        return [rel for rel in self.relationships if rel.target == key]

    def resources_by_kind(self, kind: str) -> list[ProcessedResource]:
        return [r for key, r in self.resources.items() if key.kind == kind]

    def __len__(self) -> int:
        return len(self.resources)
