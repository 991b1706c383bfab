"""Data loading, schema inference and validation components."""

from .loader import CsvDataLoader
from .schema import (
    ColumnKind,
    ColumnSchema,
    Schema,
    SchemaInferrer,
    guess_target_column,
    infer_schema,
)
from .validate import DatasetValidator

__all__ = [
    "CsvDataLoader",
    "ColumnKind",
    "ColumnSchema",
    "Schema",
    "SchemaInferrer",
    "guess_target_column",
    "infer_schema",
    "DatasetValidator",
]
