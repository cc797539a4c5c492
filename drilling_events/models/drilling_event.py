from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

"""DrillingEvent domain model.

The canonical unit handed to downstream reporting. Instances are immutable and
are passed by value between the parsing, dedup and store layers.
"""

__all__ = [
    "DEFAULT_SUBCATEGORY",
    "DrillingEvent",
    "RawRow",
]

# Used when a row carries no usable subcategory value
DEFAULT_SUBCATEGORY = "Evento"

# One spreadsheet row: header -> scalar, in sheet column order
RawRow = Mapping[str, Any]


@dataclass(frozen=True)
class DrillingEvent:
    """A single drilling event at a given measured depth of a well.

    Invariants enforced by the builders (not by the dataclass itself):
    well and subcategory are non-empty trimmed strings, depth >= 0.
    """
    id: str  # evt-<row>-<suffix> for fresh rows, store id once committed
    well: str  # wellbore name, trimmed
    depth: float  # measured depth in meters
    subcategory: str  # NPT / operational classification
    comment: str = ""  # free text, may be empty
