"""Configuration helpers for the subscription map clustering tools."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from .geo import DIVIDE, STRATEGIES


@dataclass(frozen=True)
class DatasetConfig:
    """Where the raw customer/subscription dump lives."""

    records_path: str
    format: str = "csv"  # csv | json | jsonl
    limit: Optional[int] = None


@dataclass(frozen=True)
class FilterConfig:
    """Caller-side candidate selection applied before clustering."""

    status: Optional[str] = None  # e.g. cancel | dismantle | suspend
    search: Optional[str] = None


@dataclass(frozen=True)
class ClusterConfig:
    """Grid resolution strategy and cluster payload shape."""

    strategy: str = DIVIDE  # divide | multiply
    default_zoom: int = 10
    max_items: int = 5
    summary_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OutputConfig:
    """Where the clustering job should persist its payloads."""

    base_path: str = "./data/output"


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard defaults (Indonesia centre)."""

    center_lat: float = -2.5489
    center_lng: float = 118.0149
    default_zoom: int = 5


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Aggregated configuration model."""

    dataset: DatasetConfig
    filters: FilterConfig
    clustering: ClusterConfig
    output: OutputConfig
    dashboard: DashboardConfig
    logging: LoggingConfig


def load_config(path: str | Path) -> AppConfig:
    """Parse a YAML config file into an AppConfig dataclass."""

    raw = _load_yaml(path)
    dataset_cfg = raw.get("dataset", {})
    filters_cfg = raw.get("filters", {})
    cluster_cfg = raw.get("clustering", {})
    output_cfg = raw.get("output", {})
    dashboard_cfg = raw.get("dashboard", {})
    logging_cfg = raw.get("logging", {})

    dataset = DatasetConfig(
        records_path=str(dataset_cfg.get("records_path", "./data/subscriptions.csv")),
        format=str(dataset_cfg.get("format", "csv")).lower(),
        limit=dataset_cfg.get("limit"),
    )
    filters = FilterConfig(
        status=filters_cfg.get("status"),
        search=filters_cfg.get("search"),
    )
    clustering = ClusterConfig(
        strategy=str(cluster_cfg.get("strategy", DIVIDE)).lower(),
        default_zoom=int(cluster_cfg.get("default_zoom", 10)),
        max_items=int(cluster_cfg.get("max_items", 5)),
        summary_fields=tuple(str(name) for name in cluster_cfg.get("summary_fields", ()) or ()),
    )
    if clustering.strategy not in STRATEGIES:
        raise ValueError(f"clustering.strategy must be one of {STRATEGIES}, got {clustering.strategy!r}.")
    output = OutputConfig(base_path=str(output_cfg.get("base_path", "./data/output")))
    dashboard = DashboardConfig(
        center_lat=float(dashboard_cfg.get("center_lat", -2.5489)),
        center_lng=float(dashboard_cfg.get("center_lng", 118.0149)),
        default_zoom=int(dashboard_cfg.get("default_zoom", 5)),
    )
    log = LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper())
    return AppConfig(
        dataset=dataset,
        filters=filters,
        clustering=clustering,
        output=output,
        dashboard=dashboard,
        logging=log,
    )


def _load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a top-level mapping.")
    return data
