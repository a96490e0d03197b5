"""Configuration loading and validation for statgraph."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class StorageConfig:
    """Where collected statistics files live."""

    output_path: str = "./statistics"


@dataclass
class TopologyConfig:
    """How the live hosts of the cluster are discovered.

    ``url`` takes precedence over ``hosts`` when both are set.
    """

    hosts: list[str] = field(default_factory=list)
    url: str = ""
    timeout_seconds: float = 10.0
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class QueryConfig:
    """Defaults applied to series requests."""

    default_duration_minutes: int = 30
    default_scope: str = "ALL"
    parallel_hosts: int = 1


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class StatGraphConfig:
    """Top-level statgraph configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    topology: TopologyConfig = field(default_factory=TopologyConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using STATGRAPH_ prefix."""
    env_map = {
        "STATGRAPH_STATS_PATH": ("storage", "output_path"),
        "STATGRAPH_TOPOLOGY_URL": ("topology", "url"),
        "STATGRAPH_TOPOLOGY_HOSTS": ("topology", "hosts"),
        "STATGRAPH_DEFAULT_DURATION": ("query", "default_duration_minutes"),
        "STATGRAPH_PARALLEL_HOSTS": ("query", "parallel_hosts"),
        "STATGRAPH_SERVER_PORT": ("server", "port"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            # coerce non-string values
            if final_key == "hosts":
                obj[final_key] = [h.strip() for h in value.split(",") if h.strip()]
            elif final_key in ("default_duration_minutes", "parallel_hosts", "port"):
                obj[final_key] = int(value)
            else:
                obj[final_key] = value
    return data


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        return cls()
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> StatGraphConfig:
    """Convert a raw dictionary to a StatGraphConfig dataclass."""
    return StatGraphConfig(
        storage=_section(StorageConfig, data.get("storage", {})),
        topology=_section(TopologyConfig, data.get("topology", {})),
        query=_section(QueryConfig, data.get("query", {})),
        server=_section(ServerConfig, data.get("server", {})),
    )


def load_config(path: str | Path | None = None) -> StatGraphConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``statgraph.yaml`` in the current directory if *path* is None.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("statgraph.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    cfg = _dict_to_config(data)
    if cfg.query.default_duration_minutes < 0:
        raise ValueError("query.default_duration_minutes must not be negative")
    if cfg.query.parallel_hosts < 1:
        raise ValueError("query.parallel_hosts must be at least 1")
    return cfg
