"""Domain models for the drilling event ingester.

This package contains the canonical event type, the field/synonym model used
for header resolution, result/diagnostic types and configuration dataclasses.
"""

from .config_models import DatabaseConfig, IngestConfig, StoreConfig
from .drilling_event import DEFAULT_SUBCATEGORY, DrillingEvent, RawRow
from .field_spec import DEFAULT_FIELD_SPECS, FieldSpec
from .ingest_result import (
    FetchResult,
    IngestDiagnostics,
    IngestResult,
    IngestStatus,
    RejectReason,
    RowRejection,
    WriteResult,
)
from .processing_result import FileStat, FileStatus, ProcessingResult

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "IngestConfig",
    "StoreConfig",
    # Event model
    "DEFAULT_SUBCATEGORY",
    "DrillingEvent",
    "RawRow",
    "DEFAULT_FIELD_SPECS",
    "FieldSpec",
    # Results
    "FetchResult",
    "IngestDiagnostics",
    "IngestResult",
    "IngestStatus",
    "RejectReason",
    "RowRejection",
    "WriteResult",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
]
