"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_LABEL_KEYS: tuple[str, ...] = (
    "app.kubernetes.io/name",
    "app.kubernetes.io/instance",
    "app",
    "name",
)


@dataclass(frozen=True)
class GroupingConfig:
    """Resource grouping configuration.

    ``label_keys`` are consulted in order; the first one present with a
    non-empty value names the resource's group.
    """

    label_keys: tuple[str, ...] = DEFAULT_LABEL_KEYS


@dataclass(frozen=True)
class DependencyConfig:
    """Cross-chart dependency entry formatting."""

    repository_template: str = "file://../{name}"
    condition_template: str = "{name}.enabled"


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    renderer: str = "json"


@dataclass
class ChartGraphConfig:
    """Top-level chartgraph configuration."""

    chart_version: str = "0.1.0"
    grouping: GroupingConfig = field(default_factory=GroupingConfig)
    dependencies: DependencyConfig = field(default_factory=DependencyConfig)
    log: LogConfig = field(default_factory=LogConfig)
