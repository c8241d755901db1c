from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from smart_collection.config_namespace import ConfigNamespace
from smart_collection.errors import ConfigurationError

CONFIG_ENV_VAR = "SMART_COLLECTION_CONFIG"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except FileNotFoundError:
        raise
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ConfigurationError(
                f"Invalid config overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    if isinstance(overlay, Mapping):
        raise ConfigurationError(
            f"Invalid config overlay merge at {path}: base is {type(base).__name__} but overlay is mapping"
        )
    return overlay


def load_config_mapping(path: str | os.PathLike[str], *, local_overlay: bool = True) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load a YAML mapping and, when present, deep-merge its `<stem>.local.yaml` sibling.

    Returns (config, meta) where meta lists the files that were read.
    """

    base_path = Path(os.path.expandvars(os.path.expanduser(str(path)))).resolve()
    cfg = _load_yaml_mapping(str(base_path))
    paths = [str(base_path)]

    if local_overlay:
        overlay_path = base_path.with_name(f"{base_path.stem}.local{base_path.suffix or '.yaml'}")
        if overlay_path.is_file():
            overlay = _load_yaml_mapping(str(overlay_path))
            cfg = _deep_merge(cfg, overlay, path="")
            paths.append(str(overlay_path))

    meta = {"mode": "base+local" if len(paths) > 1 else "base", "paths": paths}
    return cfg, meta


@dataclass(frozen=True)
class CollectionConfig:
    name: str | None = None
    features: tuple[str, ...] = ()
    all_features: bool = False
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    @staticmethod
    def from_dict(cfg: Mapping[str, Any]) -> "CollectionConfig":
        """
        Parse the `collection` section of a configuration mapping.

        Raises:
            ConfigurationError: on missing sections, wrong types or unknown keys.
        """

        if not isinstance(cfg, Mapping):
            raise ConfigurationError("Config must be a mapping")

        root = ConfigNamespace(dict(cfg), path="")
        section = root.namespace("collection", required=False)
        name = section.get_str("name", default=None)
        features = section.get_list_str("features", default=())
        all_features = section.get_bool("all_features", default=False)
        log_level = section.get_str("log_level", default="WARNING", choices=LOG_LEVELS)
        root.assert_consumed()

        return CollectionConfig(
            name=name,
            features=tuple(features),
            all_features=all_features,
            log_level=str(log_level),
        )


def load_collection_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env_var: str = CONFIG_ENV_VAR,
    local_overlay: bool = True,
) -> CollectionConfig:
    if path is None:
        raw_env = os.environ.get(env_var, "").strip()
        if not raw_env:
            raise ConfigurationError(f"No config path given and {env_var} is not set")
        path = raw_env

    cfg, _meta = load_config_mapping(path, local_overlay=local_overlay)
    return CollectionConfig.from_dict(cfg)


__all__ = [
    "CONFIG_ENV_VAR",
    "CollectionConfig",
    "load_collection_config",
    "load_config_mapping",
]
