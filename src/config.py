"""YAML configuration for layout defaults and logging."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import get_args

import yaml

from layout import DEFAULT_LAYOUT_OPTIONS, LayoutOptions, resolve_options
from log import LogLevel

LOG_LEVELS = get_args(LogLevel)

CONFIG_ENV_VAR = "FAMILY_TREE_LAYOUT_CONFIG"


@dataclass
class AppConfig:
    layout: LayoutOptions = DEFAULT_LAYOUT_OPTIONS
    layout_timeout: float | None = 30.0
    graphviz_prog: str = "dot"
    log_level: str = "INFO"
    source: Path | None = field(default=None, compare=False)


def _layout_from(data: dict) -> LayoutOptions:
    known = {f.name for f in fields(LayoutOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown layout options in config: {unknown}")
    return resolve_options(data)


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    The path defaults to $FAMILY_TREE_LAYOUT_CONFIG. Without a file, the
    built-in defaults are used.

    Example:
        layout:
          direction: DOWN
          node_spacing: 30
          layer_spacing: 80
        layout_timeout: 10
        graphviz_prog: dot
        logging:
          level: DEBUG
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return AppConfig()
        path = Path(env_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    timeout = data.get("layout_timeout", 30.0)
    log_level = str((data.get("logging") or {}).get("level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Unknown logging level in config: {log_level}")

    return AppConfig(
        layout=_layout_from(data.get("layout") or {}),
        layout_timeout=float(timeout) if timeout is not None else None,
        graphviz_prog=data.get("graphviz_prog", "dot"),
        log_level=log_level,
        source=path,
    )
