"""Integration tests: grouping → dependency analysis through plan_charts()."""

from __future__ import annotations

import threading
import time

import pytest
from structlog.testing import capture_logs

from chartgraph import CircularDependencyError, PartitionError, RunCancelledError, plan_charts
from chartgraph.dependencies import detect_common_dependencies, install_order
from chartgraph.models.charts import ChartPlan, GroupingStrategy
from chartgraph.models.config import ChartGraphConfig, DependencyConfig
from chartgraph.models.resources import ResourceGraph

from .conftest import make_rel, make_resource


def _members(plan: ChartPlan, name: str) -> set[str]:
    group = plan.grouping.find(name)
    assert group is not None, f"no group named {name}"
    return {str(r.key) for r in group.resources}


class TestShopPlan:
    def test_groups(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "1.0.0")

        assert plan.grouping.group_names() == ["backend", "database", "frontend", "feature-flags"]
        assert _members(plan, "frontend") == {
            "Ingress/shop/frontend",
            "Service/shop/frontend",
            "Deployment/shop/frontend",
        }
        shared = plan.grouping.find("feature-flags")
        assert shared is not None
        assert shared.strategy == GroupingStrategy.RELATIONSHIP
        assert shared.namespace == ""

    def test_dependencies(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "1.0.0")

        assert {chart: [d.name for d in deps] for chart, deps in plan.dependencies.items()} == {
            "backend": ["database"],
            "frontend": ["backend"],
        }
        dep = plan.dependencies["frontend"][0]
        assert dep.version == "1.0.0"
        assert dep.repository == "file://../backend"
        assert dep.condition == "backend.enabled"

    def test_install_order(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "1.0.0")
        order = install_order(plan.dependencies, plan.grouping.group_names())
        assert order.index("database") < order.index("backend") < order.index("frontend")
        assert "feature-flags" in order

    def test_infrastructure_dependencies_per_group(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "1.0.0")
        found = {g.name: [d.name for d in detect_common_dependencies(g.resources)] for g in plan.grouping.groups}
        assert found == {
            "backend": ["redis"],
            "database": ["postgresql"],
            "frontend": [],
            "feature-flags": [],
        }

    def test_config_supplies_version_and_templates(self, shop_graph: ResourceGraph) -> None:
        cfg = ChartGraphConfig(
            chart_version="3.1.4",
            dependencies=DependencyConfig(repository_template="file://charts/{name}"),
        )
        plan = plan_charts(shop_graph, config=cfg)
        dep = plan.dependencies["backend"][0]
        assert dep.version == "3.1.4"
        assert dep.repository == "file://charts/database"

    def test_explicit_version_overrides_config(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "9.9.9", config=ChartGraphConfig(chart_version="3.1.4"))
        assert plan.dependencies["backend"][0].version == "9.9.9"

    def test_empty_version_is_not_replaced_by_config(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "", config=ChartGraphConfig(chart_version="3.1.4"))
        assert plan.dependencies["backend"][0].version == ""

    def test_repeatable(self, shop_graph: ResourceGraph) -> None:
        assert plan_charts(shop_graph, "1.0.0") == plan_charts(shop_graph, "1.0.0")


class TestOperatorPlan:
    def test_rbac_spans_cluster_scope(self, operator_graph: ResourceGraph) -> None:
        plan = plan_charts(operator_graph, "0.2.0")

        assert [(g.name, g.strategy) for g in plan.grouping.groups] == [
            ("widget-operator", GroupingStrategy.RELATIONSHIP),
            ("operators", GroupingStrategy.NAMESPACE),
            ("widgets.example.com", GroupingStrategy.INDIVIDUAL),
        ]
        assert _members(plan, "widget-operator") == {
            "ServiceAccount/operators/widget-operator",
            "Deployment/operators/widget-operator",
            "ClusterRole/widget-operator",
            "ClusterRoleBinding/widget-operator",
        }
        assert plan.dependencies == {}


class TestFailures:
    def test_cycle_aborts_run(self, cyclic_shop_graph: ResourceGraph) -> None:
        with pytest.raises(CircularDependencyError) as exc_info:
            plan_charts(cyclic_shop_graph, "1.0.0")
        assert str(exc_info.value) == "circular dependency detected: frontend -> backend"

    def test_cycle_is_logged(self, cyclic_shop_graph: ResourceGraph) -> None:
        with capture_logs() as logs, pytest.raises(CircularDependencyError):
            plan_charts(cyclic_shop_graph, "1.0.0")
        events = [entry["event"] for entry in logs]
        assert "circular_dependency" in events
        assert "plan_failed" in events
        assert "plan_complete" not in events

    def test_malformed_key_aborts_run(self) -> None:
        graph = ResourceGraph.from_resources([make_resource("ConfigMap", "")])
        with pytest.raises(PartitionError):
            plan_charts(graph, "1.0.0")

    def test_empty_graph(self) -> None:
        plan = plan_charts(ResourceGraph(), "1.0.0")
        assert plan.grouping.groups == ()
        assert plan.dependencies == {}

    def test_none_graph(self) -> None:
        assert plan_charts(None).grouping.groups == ()


class _FlipAfter:
    """Cancel signal that reports set after ``n`` checks."""

    def __init__(self, n: int) -> None:
        self.remaining = n
        self.checks = 0

    def is_set(self) -> bool:
        self.checks += 1
        if self.remaining == 0:
            return True
        self.remaining -= 1
        return False


class TestCancellation:
    def test_cancelled_before_grouping(self, shop_graph: ResourceGraph) -> None:
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RunCancelledError) as exc_info:
            plan_charts(shop_graph, "1.0.0", cancel=cancel)
        assert exc_info.value.stage == "grouping"

    def test_cancelled_between_passes(self, shop_graph: ResourceGraph) -> None:
        with pytest.raises(RunCancelledError) as exc_info:
            plan_charts(shop_graph, "1.0.0", cancel=_FlipAfter(1))
        assert exc_info.value.stage == "dependencies"

    def test_checked_once_per_stage(self, shop_graph: ResourceGraph) -> None:
        signal = _FlipAfter(10)
        plan_charts(shop_graph, "1.0.0", cancel=signal)
        assert signal.checks == 2

    def test_unset_event_runs_to_completion(self, shop_graph: ResourceGraph) -> None:
        plan = plan_charts(shop_graph, "1.0.0", cancel=threading.Event())
        assert len(plan.grouping.groups) == 4


# ---------------------------------------------------------------------------
# Large graphs plan within a fixed time budget
# ---------------------------------------------------------------------------


@pytest.mark.performance
class TestPlanPerformance:
    def test_5000_resources_under_2s(self) -> None:
        """Plan a graph of 1000 five-resource services chained by references."""
        resources = []
        rels = []
        previous = None
        for i in range(1000):
            app = f"svc-{i:04d}" if i % 2 == 0 else None
            ns = f"team-{i % 50}"
            deploy = make_resource("Deployment", f"svc-{i}", namespace=ns, app=app)
            svc = make_resource("Service", f"svc-{i}", namespace=ns, app=app)
            cm = make_resource("ConfigMap", f"svc-{i}-config", namespace=ns, app=app)
            secret = make_resource("Secret", f"svc-{i}-creds", namespace=ns, app=app)
            sa = make_resource("ServiceAccount", f"svc-{i}", namespace=ns, app=app)
            resources.extend([deploy, svc, cm, secret, sa])
            rels.extend([make_rel(svc, deploy), make_rel(deploy, cm), make_rel(deploy, secret), make_rel(deploy, sa)])
            if previous is not None and i % 2 == 0:
                rels.append(make_rel(deploy, previous))
            previous = svc
        graph = ResourceGraph.from_resources(resources, rels)

        start = time.monotonic()
        plan = plan_charts(graph, "1.0.0")
        elapsed_ms = (time.monotonic() - start) * 1000.0

        assert elapsed_ms < 2000.0, f"plan_charts took {elapsed_ms:.1f}ms (budget: 2000ms)"
        assert sum(len(g.resources) for g in plan.grouping.groups) == 5000
