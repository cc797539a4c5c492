from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_MAX_ROWS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TABLE,
    DatabaseConfig,
    IngestConfig,
    StoreConfig,
)
from ..models.drilling_event import DEFAULT_SUBCATEGORY
from ..models.field_spec import build_field_specs

"""Config loader.

Responsibilities:
- Load YAML (config/ingest.yml by default)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for optional sections
"""

DEFAULT_CONFIG_PATH = Path("config/ingest.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> IngestConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    store_raw = data.get("store") or {}
    db_raw = data.get("database") or {}
    try:
        field_specs = build_field_specs(data.get("field_synonyms"))
    except ValueError as e:
        raise ConfigError(f"config validation failed: {e}") from e

    return IngestConfig(
        source_directory=data["source_directory"],
        store=StoreConfig(
            table=store_raw.get("table", DEFAULT_TABLE),
            page_size=store_raw.get("page_size", DEFAULT_PAGE_SIZE),
            max_rows=store_raw.get("max_rows", DEFAULT_MAX_ROWS),
        ),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
        default_subcategory=data.get("default_subcategory", DEFAULT_SUBCATEGORY).strip(),
        field_specs=field_specs,
    )
