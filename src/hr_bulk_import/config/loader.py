from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..mapping.variants import HeaderVariantTable, VariantTableError

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/import.yml``)
- Validate against the packaged JSON schema (``config_schema.json``)
- Apply defaults (timeout 10s, packaged campus role catalogue)
- Apply environment overrides: HR_API_BASE_URL, HR_API_TOKEN, HR_CAMPUS
"""

__all__ = [
    "ConfigError",
    "ImportConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_API_BASE_URL",
    "load_config",
    "default_config",
    "load_header_variants",
    "load_campus_roles",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
DEFAULT_API_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT_SECONDS = 10.0

SCHEMA_RESOURCE = "config_schema.json"
CAMPUS_ROLES_RESOURCE = "campus_roles.yml"

ENV_BASE_URL = "HR_API_BASE_URL"
ENV_TOKEN = "HR_API_TOKEN"
ENV_CAMPUS = "HR_CAMPUS"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ImportConfig:
    api_base_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    operator_campus: str | None = None
    api_token: str | None = None  # 環境変数からのみ (YAML には置かない)
    header_variants: str | None = None  # user variant file, None = packaged table
    campus_roles: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    branches: dict[str, list[dict[str, Any]]] = field(default_factory=dict)


def _read_resource(name: str) -> str:
    return resources.files("hr_bulk_import.config").joinpath(name).read_text(encoding="utf-8")


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file unreadable or the data violates it
    """
    try:
        schema = json.loads(_read_resource(SCHEMA_RESOURCE))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    try:
        jsonschema.validate(data, schema)
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_campus_roles() -> dict[str, list[dict[str, str]]]:
    """Packaged per-campus role catalogue."""
    return yaml.safe_load(_read_resource(CAMPUS_ROLES_RESOURCE)) or {}


def _apply_env(cfg: dict[str, Any]) -> dict[str, Any]:
    if os.getenv(ENV_BASE_URL):
        cfg["api_base_url"] = os.environ[ENV_BASE_URL]
    if os.getenv(ENV_CAMPUS):
        cfg["operator_campus"] = os.environ[ENV_CAMPUS]
    cfg["api_token"] = os.getenv(ENV_TOKEN) or None
    return cfg


def _build(data: dict[str, Any]) -> ImportConfig:
    cfg = _apply_env(dict(data))
    return ImportConfig(
        api_base_url=cfg["api_base_url"],
        timeout_seconds=float(cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        operator_campus=cfg.get("operator_campus"),
        api_token=cfg.get("api_token"),
        header_variants=cfg.get("header_variants"),
        campus_roles=cfg.get("campus_roles") or load_campus_roles(),
        branches=cfg.get("branches") or {},
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)
    return _build(data)


def default_config() -> ImportConfig:
    """Config used when no YAML file exists: defaults plus environment."""
    return _build({"api_base_url": DEFAULT_API_BASE_URL})


def load_header_variants(path: str | Path | None = None) -> HeaderVariantTable:
    """User variant file when given, else the packaged table."""
    try:
        if path is None:
            return HeaderVariantTable.default()
        return HeaderVariantTable.from_file(Path(path))
    except VariantTableError as e:
        raise ConfigError(f"header variants: {e}") from e
