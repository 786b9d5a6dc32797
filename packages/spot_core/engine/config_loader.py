"""YAML-backed engine configuration (size sets, spreads, line patterns, templates)."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from .types import ConfigError

_LOG = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


def config_path(env_name: str, filename: str) -> Path:
    # 优先环境变量指定的外置文件
    override = os.getenv(env_name)
    if override:
        p = Path(override).expanduser().resolve()
        if p.exists():
            return p
        _LOG.warning("config_override_missing", extra={"env": env_name, "path": str(p)})
    return _CONFIG_DIR / filename


@lru_cache(maxsize=16)
def load_yaml_file(path: str) -> Mapping[str, Any]:
    """Parse a YAML mapping once per path; a missing file yields an empty mapping."""
    fp = Path(path)
    try:
        text = fp.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOG.warning("config_file_missing", extra={"path": str(fp)})
        return {}
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML config: {fp}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config root must be a mapping: {fp}")
    return data


def engine_config() -> Mapping[str, Any]:
    return load_yaml_file(str(config_path("SPOTGEN_ENGINE_FILE", "engine.yaml")))


def templates_config() -> Mapping[str, Any]:
    return load_yaml_file(str(config_path("SPOTGEN_TEMPLATES_FILE", "meta_templates.yaml")))


def require(cfg: Mapping[str, Any], dotted: str) -> Any:
    """Walk ``a.b.c`` through nested mappings; a missing field is fatal."""
    node: Any = cfg
    walked: list[str] = []
    for part in dotted.split("."):
        walked.append(part)
        if not isinstance(node, Mapping) or part not in node:
            raise ConfigError(f"Missing required config field: {'.'.join(walked)}")
        node = node[part]
    return node


def engine_value(dotted: str) -> Any:
    return require(engine_config(), dotted)


REQUIRED_ENGINE_KEYS = (
    "stack_pressure.high_spr",
    "stack_pressure.medium_spr",
    "bet_size_sets",
    "betting_mode.min_spr_overbet",
    "all_in.stack_fraction",
    "all_in.max_spr",
    "option_sizing",
    "spacing",
    "frequency_spreads",
    "frequency_bias.check_anchor",
    "frequency_bias.polarized",
    "payoff_spreads",
    "line.positions",
    "line.patterns",
    "line.blinds",
    "generator.max_retries",
    "tags.max_tags",
)


def missing_engine_keys(cfg: Mapping[str, Any] | None = None) -> list[str]:
    """Required fields absent from the engine config (logged, not raised)."""
    cfg = engine_config() if cfg is None else cfg
    missing: list[str] = []
    for key in REQUIRED_ENGINE_KEYS:
        try:
            require(cfg, key)
        except ConfigError:
            missing.append(key)
    if missing:
        _LOG.warning("engine_config_missing_keys", extra={"missing": missing})
    return missing


def reload_config() -> None:
    load_yaml_file.cache_clear()


__all__ = [
    "config_path",
    "engine_config",
    "engine_value",
    "load_yaml_file",
    "missing_engine_keys",
    "reload_config",
    "require",
    "templates_config",
]
