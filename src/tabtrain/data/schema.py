"""Column kind inference over a bounded sample of raw rows."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pandas as pd

from tabtrain.core.exceptions import InvalidColumnError, InvalidSchemaError
from tabtrain.core.records import Rows, as_string, is_finite_number, is_missing, to_records
from tabtrain.core.utils import LoggerFactory

SAMPLE_ROWS = 500
TEXT_MIN_LENGTH = 20
TEXT_SHARE = 0.3
NUMERIC_SHARE = 0.7


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"


@dataclass(frozen=True)
class ColumnSchema:
    name: str
    kind: ColumnKind
    unique_count: int


@dataclass(frozen=True)
class Schema:
    """Inferred kinds for every column, in first-encountered column order."""

    columns: Tuple[ColumnSchema, ...]
    sample_size: int = 0
    _by_name: Dict[str, ColumnSchema] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {c.name: c for c in self.columns})

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> ColumnSchema:
        try:
            return self._by_name[name]
        except KeyError:
            raise InvalidColumnError(name) from None

    def __iter__(self) -> Iterator[ColumnSchema]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def get(self, name: str) -> Optional[ColumnSchema]:
        return self._by_name.get(name)

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def kind_of(self, name: str) -> ColumnKind:
        return self[name].kind

    def columns_of(self, kind: ColumnKind) -> List[str]:
        return [c.name for c in self.columns if c.kind == kind]

    def kind_counts(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in ColumnKind}
        for c in self.columns:
            counts[c.kind.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {c.name: {"kind": c.kind.value, "unique": c.unique_count} for c in self.columns}


class SchemaInferrer:
    """Classifies each column as numeric, categorical or text.

    Rules, in precedence order, over the first ``sample_rows`` rows:

    1. more than ``text_share`` of the sampled values are strings longer than
       ``text_min_length`` characters -> text
    2. more than ``numeric_share`` of them are finite numbers -> numeric
    3. otherwise -> categorical
    """

    def __init__(
        self,
        sample_rows: int = SAMPLE_ROWS,
        text_min_length: int = TEXT_MIN_LENGTH,
        text_share: float = TEXT_SHARE,
        numeric_share: float = NUMERIC_SHARE,
    ):
        self.sample_rows = sample_rows
        self.text_min_length = text_min_length
        self.text_share = text_share
        self.numeric_share = numeric_share
        self.logger = LoggerFactory.get_logger(self.__class__.__name__)

    def infer(self, rows: Rows) -> Schema:
        if isinstance(rows, pd.DataFrame):
            rows = to_records(rows)
        if not rows:
            raise InvalidSchemaError("Cannot infer a schema from an empty row set")

        sample = rows[: min(self.sample_rows, len(rows))]
        names = list(dict.fromkeys(col for row in sample for col in row))
        if not names:
            raise InvalidSchemaError("Rows have no columns")

        columns = tuple(self._infer_column(name, [row.get(name) for row in sample]) for name in names)
        schema = Schema(columns=columns, sample_size=len(sample))
        self.logger.info(f"Schema: {len(columns)} columns from {len(sample)} sampled rows {schema.kind_counts()}")
        return schema

    def _infer_column(self, name: str, values: List[Any]) -> ColumnSchema:
        n = len(values)
        unique = {as_string(v) for v in values if not is_missing(v)}
        if n == 0:
            return ColumnSchema(name, ColumnKind.CATEGORICAL, len(unique))

        long_text = sum(1 for v in values if isinstance(v, str) and len(v) > self.text_min_length)
        numeric = sum(1 for v in values if is_finite_number(v))

        if long_text / n > self.text_share:
            kind = ColumnKind.TEXT
        elif numeric / n > self.numeric_share:
            kind = ColumnKind.NUMERIC
        else:
            kind = ColumnKind.CATEGORICAL
        return ColumnSchema(name, kind, len(unique))


def infer_schema(rows: Rows, sample_rows: int = SAMPLE_ROWS) -> Schema:
    return SchemaInferrer(sample_rows=sample_rows).infer(rows)


_TARGET_HINT = re.compile(r"pair|score|rating|quality", re.IGNORECASE)


def guess_target_column(names: List[str]) -> Optional[str]:
    """First column whose name looks like a label (pairing, score, rating, quality), else the first column."""
    for name in names:
        if _TARGET_HINT.search(name):
            return name
    return names[0] if names else None
