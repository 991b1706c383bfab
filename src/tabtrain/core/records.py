"""Row records and explicit cell coercion.

Raw rows are mappings from column name to a scalar cell: a number, a string,
a bool, or a missing value (``None``/NaN). Every stage reads cells through the
helpers below instead of relying on implicit conversions.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from tabtrain.core.exceptions import InvalidSchemaError

Scalar = Union[float, int, str, bool, None]
Row = Mapping[str, Any]
Rows = Sequence[Row]

MISSING_STRING = "null"


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_finite_number(value: Any) -> bool:
    """True for real numbers (bools excluded) that are finite."""
    if _is_bool(value) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))


def as_finite(value: Any) -> Optional[float]:
    """Coerce a cell to a finite float, or ``None`` when that is not possible."""
    if is_missing(value):
        return None
    if _is_bool(value):
        return float(value)
    if isinstance(value, numbers.Real):
        x = float(value)
        return x if math.isfinite(x) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            x = float(text)
        except ValueError:
            return None
        return x if math.isfinite(x) else None
    return None


def as_string(value: Any) -> str:
    """Stable string form of a cell, used for categories and labels.

    Integral floats drop their fractional part so ``5`` and ``5.0`` map to the
    same category.
    """
    if is_missing(value):
        return MISSING_STRING
    if _is_bool(value):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        x = float(value)
        if math.isinf(x):
            return "Infinity" if x > 0 else "-Infinity"
        if x.is_integer():
            return str(int(x))
        return repr(x)
    return str(value)


def _to_python(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    return None if is_missing(value) else value


def to_records(data: Union[pd.DataFrame, Iterable[Row]]) -> List[Dict[str, Any]]:
    """Materialise a DataFrame or an iterable of mappings as a list of plain dicts."""
    if isinstance(data, pd.DataFrame):
        return [
            {str(col): _to_python(val) for col, val in rec.items()}
            for rec in data.to_dict(orient="records")
        ]

    if isinstance(data, (Mapping, str, bytes)):
        raise InvalidSchemaError(
            f"Expected a sequence of row mappings, got {type(data).__name__}"
        )
    try:
        iterator = iter(data)
    except TypeError as e:
        raise InvalidSchemaError(
            f"Expected a sequence of row mappings, got {type(data).__name__}"
        ) from e

    records: List[Dict[str, Any]] = []
    for i, row in enumerate(iterator):
        if not isinstance(row, Mapping):
            raise InvalidSchemaError(f"Row {i} is not a mapping: {type(row).__name__}")
        records.append({str(col): _to_python(val) for col, val in row.items()})
    return records
