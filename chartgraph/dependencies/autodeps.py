"""Infrastructure dependency detection.

Recognises well-known backing services (databases, caches, brokers) from
workload container signals: env var names and values, images and ports.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from chartgraph.models.charts import Dependency
from chartgraph.models.resources import ProcessedResource
from chartgraph.observability.logging import get_logger

_logger = get_logger("dependencies.autodeps")

BITNAMI_REPOSITORY = "https://charts.bitnami.com/bitnami"


@dataclass(frozen=True)
class KnownDependency:
    """Signals that identify one infrastructure chart."""

    name: str
    version: str
    env_prefixes: tuple[str, ...] = ()
    env_exact: tuple[str, ...] = ()
    env_contains: tuple[str, ...] = ()  # substrings of lower-cased env values
    images: tuple[str, ...] = ()  # bare image names, no registry or tag
    ports: tuple[int, ...] = ()

    def matches(self, env_names: Sequence[str], env_values: Sequence[str], image: str, ports: Sequence[int]) -> bool:
        for env_name in env_names:
            if env_name.startswith(self.env_prefixes) or env_name in self.env_exact:
                return True
        for value in env_values:
            if any(substr in value for substr in self.env_contains):
                return True
        if image and _image_name(image) in self.images:
            return True
        return any(port in self.ports for port in ports)


KNOWN_DEPENDENCIES: tuple[KnownDependency, ...] = (
    KnownDependency(
        name="postgresql",
        version="12.x.x",
        env_prefixes=("POSTGRES_", "PG_"),
        env_exact=("PGHOST",),
        env_contains=("postgres",),
        images=("postgres",),
        ports=(5432,),
    ),
    KnownDependency(
        name="mysql",
        version="9.x.x",
        env_prefixes=("MYSQL_",),
        images=("mysql", "mariadb"),
        ports=(3306,),
    ),
    KnownDependency(
        name="redis",
        version="18.x.x",
        env_prefixes=("REDIS_",),
        images=("redis",),
        ports=(6379,),
    ),
    KnownDependency(
        name="mongodb",
        version="14.x.x",
        env_prefixes=("MONGO_", "MONGODB_"),
        images=("mongo",),
        ports=(27017,),
    ),
    KnownDependency(
        name="rabbitmq",
        version="12.x.x",
        env_prefixes=("RABBITMQ_",),
        env_exact=("AMQP_URL",),
        images=("rabbitmq",),
        ports=(5672,),
    ),
    KnownDependency(
        name="elasticsearch",
        version="19.x.x",
        env_prefixes=("ELASTIC_", "ELASTICSEARCH_"),
        images=("elasticsearch", "elastic"),
        ports=(9200,),
    ),
    KnownDependency(
        name="kafka",
        version="26.x.x",
        env_prefixes=("KAFKA_",),
        images=("kafka",),
        ports=(9092,),
    ),
)


def _image_name(image: str) -> str:
    """Strip registry path and tag: ``docker.io/library/postgres:15`` -> ``postgres``."""
    name = image.lower().rsplit("/", 1)[-1]
    return name.split("@", 1)[0].split(":", 1)[0]


def _pod_spec(manifest: dict[str, object]) -> dict[str, object]:
    spec = manifest.get("spec")
    if not isinstance(spec, dict):
        return {}
    # CronJob -> Job -> Pod, workload -> Pod, or a bare Pod
    for path in (("jobTemplate", "spec", "template", "spec"), ("template", "spec")):
        node: object = spec
        for part in path:
            node = node.get(part) if isinstance(node, dict) else None
        if isinstance(node, dict):
            return node
    return spec


def _containers(resource: ProcessedResource) -> list[dict[str, object]]:
    pod_spec = _pod_spec(resource.manifest)
    found: list[dict[str, object]] = []
    for field_name in ("initContainers", "containers"):
        items = pod_spec.get(field_name)
        if isinstance(items, list):
            found.extend(c for c in items if isinstance(c, dict))
    return found


def _env(container: dict[str, object]) -> tuple[list[str], list[str]]:
    names: list[str] = []
    values: list[str] = []
    raw = container.get("env")
    if not isinstance(raw, list):
        return names, values
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        if isinstance(entry.get("name"), str):
            names.append(entry["name"].upper())
        if isinstance(entry.get("value"), str):
            values.append(entry["value"].lower())
    return names, values


def _ports(container: dict[str, object]) -> list[int]:
    raw = container.get("ports")
    if not isinstance(raw, list):
        return []
    return [p["containerPort"] for p in raw if isinstance(p, dict) and isinstance(p.get("containerPort"), int)]


def detect_common_dependencies(resources: Iterable[ProcessedResource] | None) -> list[Dependency]:
    """Return one Dependency per infrastructure service the resources rely on.

    Order follows ``KNOWN_DEPENDENCIES``. Resources without containers are
    ignored; None or an empty iterable yields an empty list.
    """
    if not resources:
        return []

    detected: set[str] = set()
    for resource in resources:
        for container in _containers(resource):
            env_names, env_values = _env(container)
            image = container.get("image")
            image = image if isinstance(image, str) else ""
            ports = _ports(container)
            for known in KNOWN_DEPENDENCIES:
                if known.name not in detected and known.matches(env_names, env_values, image, ports):
                    detected.add(known.name)
                    _logger.debug("infrastructure_dependency_detected", dependency=known.name, resource=str(resource.key))

    return [
        Dependency(
            name=known.name,
            version=known.version,
            repository=BITNAMI_REPOSITORY,
            condition=f"{known.name}.enabled",
        )
        for known in KNOWN_DEPENDENCIES
        if known.name in detected
    ]


def filter_existing_dependencies(detected: Iterable[Dependency], existing: Iterable[Dependency]) -> list[Dependency]:
    """Drop detected entries whose name already appears in ``existing``."""
    existing_names = {dep.name for dep in existing}
    return [dep for dep in detected if dep.name not in existing_names]
