"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from chartgraph.models.config import (
    DEFAULT_LABEL_KEYS,
    ChartGraphConfig,
    DependencyConfig,
    GroupingConfig,
    LogConfig,
)

_SEMVER = re.compile(r"^v?[0-9]+\.[0-9]+\.[0-9]+(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CHARTGRAPH_{key}", default)


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = _env(key)
    if not raw.strip():
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _validate_chart_version(value: str) -> str:
    if not _SEMVER.match(value):
        raise ValueError(f"Invalid chart version: {value}. Must be a semantic version like 0.1.0")
    return value


def _validate_name_template(value: str) -> str:
    if "{name}" not in value:
        raise ValueError(f"Invalid dependency template: {value}. Must contain '{{name}}'")
    try:
        value.format(name="x")
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"Invalid dependency template: {value}. Only '{{name}}' may be substituted") from exc
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_renderer(value: str) -> str:
    valid = {"json", "console"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log renderer: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> ChartGraphConfig:
    """Load configuration from CHARTGRAPH_* environment variables."""
    defaults = DependencyConfig()
    return ChartGraphConfig(
        chart_version=_validate_chart_version(_env("CHART_VERSION", "0.1.0")),
        grouping=GroupingConfig(
            label_keys=_env_list("LABEL_KEYS", DEFAULT_LABEL_KEYS),
        ),
        dependencies=DependencyConfig(
            repository_template=_validate_name_template(
                _env("DEPENDENCY_REPOSITORY_TEMPLATE", defaults.repository_template)
            ),
            condition_template=_validate_name_template(
                _env("DEPENDENCY_CONDITION_TEMPLATE", defaults.condition_template)
            ),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            renderer=_validate_renderer(_env("LOG_RENDERER", "json")),
        ),
    )
