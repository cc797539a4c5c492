from __future__ import annotations

from dataclasses import dataclass, field

from .drilling_event import DEFAULT_SUBCATEGORY
from .field_spec import DEFAULT_FIELD_SPECS, FieldSpec

"""Config dataclasses for the drilling event ingester.

Built by drilling_events.config.loader after YAML parsing and JSON Schema
validation. Kept free of I/O so tests can construct them directly.
"""

DEFAULT_TABLE = "drilling_events"
DEFAULT_PAGE_SIZE = 1000
# Upper bound on rows accumulated by a paginated fetch
DEFAULT_MAX_ROWS = 100_000


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class StoreConfig:
    """Remote event table and pagination limits."""
    table: str = DEFAULT_TABLE
    page_size: int = DEFAULT_PAGE_SIZE
    max_rows: int = DEFAULT_MAX_ROWS


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object for a batch ingestion run."""
    source_directory: str  # Directory scanned for .xlsx files
    store: StoreConfig = field(default_factory=StoreConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    default_subcategory: str = DEFAULT_SUBCATEGORY
    field_specs: tuple[FieldSpec, ...] = DEFAULT_FIELD_SPECS
