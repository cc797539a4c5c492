"""Row-level parsing: depth normalization, header resolution, record building."""

from .columns import resolve_field, resolve_fields
from .numeric import normalize_depth
from .records import build_record

__all__ = [
    "build_record",
    "normalize_depth",
    "resolve_field",
    "resolve_fields",
]
