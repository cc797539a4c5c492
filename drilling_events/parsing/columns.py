from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.field_spec import FieldSpec

"""Header resolution: map logical fields onto a sheet's actual headers.

Matching is case-insensitive and substring tolerant ("Prof_Desde (m)" matches
"prof_desde"). Synonyms are tried in declared order and, for each synonym,
headers are scanned in sheet order. A precise synonym therefore wins over a
generic one even when the generic header sits further left in the sheet.
"""

__all__ = [
    "normalize_header",
    "resolve_field",
    "resolve_fields",
]


def normalize_header(key: object) -> str:
    return str(key).strip().lower()


def _matches(normalized_key: str, synonym: str) -> bool:
    return normalized_key == synonym or synonym in normalized_key


def resolve_field(row_keys: Iterable[object], synonyms: Sequence[str]) -> str | None:
    """Return the first header matching a synonym, or None when absent.

    The returned value is the original header (not normalized) so it can be
    used to index the raw row.
    """
    keys = list(row_keys)
    normalized = [normalize_header(k) for k in keys]
    for synonym in synonyms:
        target = synonym.strip().lower()
        if not target:
            continue
        for original, norm in zip(keys, normalized):
            if _matches(norm, target):
                return original  # type: ignore[return-value]
    return None


def resolve_fields(row_keys: Iterable[object], specs: Sequence[FieldSpec]) -> dict[str, str | None]:
    """Resolve every FieldSpec against one header row."""
    keys = list(row_keys)
    return {spec.name: resolve_field(keys, spec.synonyms) for spec in specs}
