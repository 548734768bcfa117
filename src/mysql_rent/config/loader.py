"""YAML + environment variable config loader."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import ValidationError

from mysql_rent.config.models import RentConfig

# Matches ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-((?:[^}\\]|\\.)*))?}")


def _resolve_env_str(value: str) -> str:
    """Replace all ${VAR} / ${VAR:-default} references in a string."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        env_val = os.environ.get(var_name)
        if env_val is not None:
            return env_val
        if default is not None:
            return default.replace("\\}", "}")
        msg = f"Environment variable '{var_name}' is not set and no default provided"
        raise ValueError(msg)

    return _ENV_PATTERN.sub(_replace, value)


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve ${VAR} and ${VAR:-default} in parsed YAML data."""
    if isinstance(data, str):
        return _resolve_env_str(data)
    if isinstance(data, dict):
        return {k: resolve_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    return data


def merge_configs(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively deep-merge *overrides* into *base* (non-mutating)."""
    merged: dict[str, Any] = {**base}
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    p = Path(path)
    if not p.exists():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        with p.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse YAML in {p}"
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            msg += f" at line {mark.line + 1}, column {mark.column + 1}"
        msg += f": {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping at top level in {p}, got {type(data).__name__}"
        raise TypeError(msg)
    return cast(dict[str, Any], resolve_env_vars(data))


def _read_script_files(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Inline ``script_files`` (relative to the config file) after ``scripts``."""
    files = data.pop("script_files", None) or []
    if not files:
        return data
    scripts = list(data.get("scripts") or [])
    for name in files:
        script_path = Path(name)
        if not script_path.is_absolute():
            script_path = base_dir / script_path
        if not script_path.exists():
            msg = f"Seed script file not found: {script_path}"
            raise FileNotFoundError(msg)
        scripts.append(script_path.read_text(encoding="utf-8"))
    data["scripts"] = scripts
    return data


def load_rent_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RentConfig:
    """Load a rent config YAML, merge explicit overrides and validate."""
    base: dict[str, Any] = {}
    if path is not None:
        base = _read_script_files(load_yaml(path), Path(path).parent)
    merged = merge_configs(base, overrides or {})
    try:
        return RentConfig.model_validate(merged)
    except ValidationError as exc:
        source = path or "overrides"
        msg = f"Invalid rent config ({source}):\n{exc}"
        raise ValueError(msg) from exc
