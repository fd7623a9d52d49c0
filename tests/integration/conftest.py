"""Shared fixtures for chartgraph integration tests.

Provides realistic resource graphs (a three-tier web shop, an operator with
cluster-scoped RBAC) so integration tests can exercise grouping and
dependency analysis together.
"""

from __future__ import annotations

import pytest

from chartgraph.models.resources import (
    ProcessedResource,
    Relationship,
    RelationshipType,
    ResourceGraph,
    ResourceKey,
)

_API_GROUPS = {
    "Deployment": "apps",
    "StatefulSet": "apps",
    "Ingress": "networking.k8s.io",
    "ClusterRole": "rbac.authorization.k8s.io",
    "ClusterRoleBinding": "rbac.authorization.k8s.io",
    "CustomResourceDefinition": "apiextensions.k8s.io",
}

# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def make_resource(
    kind: str,
    name: str,
    namespace: str = "shop",
    app: str | None = None,
    containers: list[dict[str, object]] | None = None,
) -> ProcessedResource:
    """Create a ProcessedResource with sensible defaults for testing."""
    key = ResourceKey(
        group=_API_GROUPS.get(kind, ""),
        version="v1",
        kind=kind,
        namespace=namespace,
        name=name,
    )
    labels = {"app.kubernetes.io/name": app} if app else {}
    manifest: dict[str, object] = {
        "apiVersion": key.api_version,
        "kind": kind,
        "metadata": {"name": name, "namespace": namespace, "labels": labels},
    }
    if containers is not None:
        manifest["spec"] = {"template": {"spec": {"containers": containers}}}
    return ProcessedResource(key=key, labels=labels, manifest=manifest)


def make_rel(
    source: ProcessedResource,
    target: ProcessedResource,
    rel_type: RelationshipType = RelationshipType.NAME_REFERENCE,
) -> Relationship:
    return Relationship(source=source.key, target=target.key, type=rel_type)


# ---------------------------------------------------------------------------
# Graphs
# ---------------------------------------------------------------------------


def build_shop_graph(close_cycle: bool = False) -> ResourceGraph:
    """frontend -> backend -> database, labeled; plus unlabeled shared config."""
    fe_ing = make_resource("Ingress", "frontend", app="frontend")
    fe_svc = make_resource("Service", "frontend", app="frontend")
    fe_deploy = make_resource(
        "Deployment",
        "frontend",
        app="frontend",
        containers=[{"name": "web", "image": "shop/frontend:1.4", "env": [{"name": "API_URL", "value": "http://backend"}]}],
    )
    be_svc = make_resource("Service", "backend", app="backend")
    be_deploy = make_resource(
        "Deployment",
        "backend",
        app="backend",
        containers=[{"name": "api", "image": "shop/backend:2.0", "env": [{"name": "REDIS_HOST", "value": "cache"}]}],
    )
    db_svc = make_resource("Service", "database", app="database")
    db_sts = make_resource(
        "StatefulSet",
        "database",
        app="database",
        containers=[{"name": "pg", "image": "postgres:15", "ports": [{"containerPort": 5432}]}],
    )
    flags = make_resource("ConfigMap", "feature-flags", namespace="shared")
    flag_reader = make_resource("Secret", "flag-token", namespace="platform")

    rels = [
        make_rel(fe_ing, fe_svc),
        make_rel(fe_svc, fe_deploy, RelationshipType.LABEL_SELECTOR),
        make_rel(fe_deploy, be_svc),
        make_rel(be_svc, be_deploy, RelationshipType.LABEL_SELECTOR),
        make_rel(be_deploy, db_svc),
        make_rel(db_svc, db_sts, RelationshipType.LABEL_SELECTOR),
        make_rel(flags, flag_reader, RelationshipType.ANNOTATION),
    ]
    if close_cycle:
        rels.append(make_rel(db_sts, fe_svc))

    resources = [fe_ing, fe_svc, fe_deploy, be_svc, be_deploy, db_svc, db_sts, flags, flag_reader]
    return ResourceGraph.from_resources(resources, rels)


@pytest.fixture
def shop_graph() -> ResourceGraph:
    return build_shop_graph()


@pytest.fixture
def cyclic_shop_graph() -> ResourceGraph:
    return build_shop_graph(close_cycle=True)


@pytest.fixture
def operator_graph() -> ResourceGraph:
    """An operator: namespaced workload bound to cluster-scoped RBAC and a CRD."""
    sa = make_resource("ServiceAccount", "widget-operator", namespace="operators")
    deploy = make_resource("Deployment", "widget-operator", namespace="operators")
    role = make_resource("ClusterRole", "widget-operator", namespace="")
    binding = make_resource("ClusterRoleBinding", "widget-operator", namespace="")
    crd = make_resource("CustomResourceDefinition", "widgets.example.com", namespace="")
    quota = make_resource("ResourceQuota", "limits", namespace="operators")
    rels = [
        make_rel(deploy, sa, RelationshipType.SERVICE_ACCOUNT),
        make_rel(binding, role, RelationshipType.CLUSTER_ROLE_BINDING),
        make_rel(binding, sa, RelationshipType.CLUSTER_ROLE_BINDING),
    ]
    return ResourceGraph.from_resources([sa, deploy, role, binding, crd, quota], rels)
