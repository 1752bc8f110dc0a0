"""Load and merge configuration from .gitchanges.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gitchanges.config.schema import (
    OUTPUT_FORMATS,
    DiffConfig,
    GitChangesConfig,
    OutputConfig,
    TriggerConfig,
)
from gitchanges.git.models import coerce_status

CONFIG_FILENAME = ".gitchanges.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    return cls(**filtered)


def _build_triggers(data: Dict[str, Any]) -> Dict[str, TriggerConfig]:
    triggers: Dict[str, TriggerConfig] = {}
    for name, body in (data.get("triggers") or {}).items():
        if not isinstance(body, dict):
            raise ConfigError(f"Trigger '{name}' must be a table")
        paths = body.get("paths", [])
        statuses = body.get("statuses", [])
        if isinstance(paths, str):
            paths = [paths]
        if isinstance(statuses, str):
            statuses = [statuses]
        for status in statuses:
            try:
                coerce_status(status)
            except ValueError as exc:
                raise ConfigError(f"Trigger '{name}': {exc}") from exc
        triggers[name] = TriggerConfig(
            name=name,
            paths=[str(p) for p in paths],
            statuses=[str(s) for s in statuses],
            description=str(body.get("description", "")),
        )
    return triggers


def _validate(cfg: GitChangesConfig) -> None:
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Invalid output format: {cfg.output.format} "
            f"(expected one of {', '.join(OUTPUT_FORMATS)})"
        )
    if isinstance(cfg.diff.paths, str):
        cfg.diff.paths = [cfg.diff.paths]


def _merge_env_overrides(cfg: GitChangesConfig) -> None:
    """Apply GITCHANGES_* environment variable overrides."""
    if val := os.environ.get("GITCHANGES_BASE"):
        cfg.diff.base = val
    if val := os.environ.get("GITCHANGES_HEAD"):
        cfg.diff.head = val
    if val := os.environ.get("GITCHANGES_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("GITCHANGES_PATHS"):
        sep = ":" if os.name != "nt" else ";"
        cfg.diff.paths.extend(p.strip() for p in val.split(sep) if p.strip())
    if val := os.environ.get("GITCHANGES_TIMEOUT"):
        try:
            cfg.diff.timeout = float(val)
        except ValueError:
            raise ConfigError(f"GITCHANGES_TIMEOUT must be a number, got {val!r}")


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> GitChangesConfig:
    """Load, validate, and return a GitChangesConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = GitChangesConfig()
    else:
        raw = _parse_toml(config_path)
        try:
            cfg = GitChangesConfig(
                version=raw.get("version", "1.0"),
                diff=_build_section(raw, DiffConfig, "diff"),
                output=_build_section(raw, OutputConfig, "output"),
                triggers=_build_triggers(raw),
            )
        except (TypeError, AttributeError) as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    _validate(cfg)
    _merge_env_overrides(cfg)
    return cfg
