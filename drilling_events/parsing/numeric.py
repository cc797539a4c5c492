from __future__ import annotations

import math
import numbers
import re
from decimal import Decimal
from typing import Any

"""Depth value normalization.

Operators type depths as "2,900.00", "1.500,50", "1500 m" or plain numbers.
normalize_depth() folds all of these into a float and never raises. Only the
leading number is read ("1500-1600 m" -> 1500.0); anything without one becomes
0.0.

Known ambiguity: a string with only commas ("1500,5") is read with the comma as
thousands separator, giving 15005.0. Depths are almost always whole meters so
"2,900" -> 2900 is the common case; true decimal commas without a dot are
misread. This is kept as-is.
"""

__all__ = [
    "normalize_depth",
]

_UNIT_SUFFIX = re.compile(r"\s*(m|ft|mts|pies|meters)$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^\d.\-]")
# longest leading number, like parseFloat: "1500-1600" -> 1500, "12.5.3" -> 12.5
_LEADING_NUMBER = re.compile(r"-?(\d+\.?\d*|\.\d+)")


def _is_native_number(raw: Any) -> bool:
    # bool is an int subclass but never a depth
    return isinstance(raw, (numbers.Real, Decimal)) and not isinstance(raw, bool)


def normalize_depth(raw: Any) -> float:
    """Convert a raw cell value to meters.

    Examples:
        >>> normalize_depth("2,900.00")
        2900.0
        >>> normalize_depth("1.500,50")
        1500.5
        >>> normalize_depth("1500 m")
        1500.0
        >>> normalize_depth(None)
        0.0
    """
    if _is_native_number(raw):
        value = float(raw)
        return 0.0 if math.isnan(value) else value
    if not raw or not isinstance(raw, str):
        # dates, booleans and other cell objects carry no depth
        return 0.0

    text = raw.strip()
    text = _UNIT_SUFFIX.sub("", text)

    has_comma = "," in text
    has_dot = "." in text
    if has_comma and has_dot:
        if text.rfind(",") > text.rfind("."):
            # 1.500,50 -> 1500.50
            head, _, tail = text.replace(".", "").rpartition(",")
            text = f"{head}.{tail}"
        else:
            # 1,500.50 -> 1500.50
            text = text.replace(",", "")
    elif has_comma:
        text = text.replace(",", "")

    text = _NON_NUMERIC.sub("", text)
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))
