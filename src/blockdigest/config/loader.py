"""Config loading entry points for blockdigest."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import BlockDigestConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("blockdigest.default.yaml")
HASH_FUNC_ENV = "BLOCKDIGEST_HASH_FUNC"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> BlockDigestConfig:
    """Load the configuration, layering defaults, `path`, environment and `overrides`."""

    merged = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    if path:
        merged = _deep_merge(merged, _expect_mapping(_read_structured_file(path), path))

    env_hash_func = os.getenv(HASH_FUNC_ENV)
    if env_hash_func:
        merged = _deep_merge(merged, {"hashing": {"hash_func": env_hash_func.strip()}})

    if overrides:
        merged = _deep_merge(merged, _expand_override_keys(overrides))

    try:
        return BlockDigestConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def dump_example_config(dest: Path) -> None:
    """Write the default configuration to ``dest``."""

    dest.parent.mkdir(parents=True, exist_ok=True)

    merged = _read_structured_file(DEFAULT_CONFIG_PATH)
    if dest.suffix.lower() == ".toml":
        raise ConfigError("TOML export is not supported yet; use a YAML destination.")
    if dest.suffix.lower() == ".json":
        dest.write_text(json.dumps(merged, indent=2), encoding="utf-8")
        return
    dest.write_text(yaml.safe_dump(merged, sort_keys=False), encoding="utf-8")


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix == ".json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result: dict[str, Any] = dict(base)
    for key, value in extra.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_override_keys(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Support dotted-notation overrides like ``hashing.hash_func``."""

    result: dict[str, Any] = {}
    for key, value in overrides.items():
        if isinstance(key, str) and "." in key:
            *parents, leaf = key.split(".")
            nested: dict[str, Any] = {leaf: value}
            for segment in reversed(parents):
                nested = {segment: nested}
            result = _deep_merge(result, nested)
        else:
            result = _deep_merge(result, {key: value})
    return result


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "HASH_FUNC_ENV",
    "dump_example_config",
    "load_config",
]
