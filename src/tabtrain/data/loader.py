"""CSV data loading from local files or remote URLs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd

from tabtrain.core.exceptions import InvalidSchemaError
from tabtrain.core.interfaces import IDataLoader
from tabtrain.core.records import to_records
from tabtrain.core.utils import LoggerFactory

_REMOTE_PREFIXES = ("http://", "https://", "ftp://", "s3://")


def is_remote(source: Union[str, Path]) -> bool:
    return isinstance(source, str) and source.lower().startswith(_REMOTE_PREFIXES)


def type_cells(df: pd.DataFrame) -> pd.DataFrame:
    """Numbers where a cell parses as a finite number, the original text elsewhere."""
    typed = {}
    for col in df.columns:
        numbers = pd.to_numeric(df[col], errors="coerce").to_numpy(dtype=float)
        finite = np.isfinite(numbers)
        cells = df[col].to_numpy(dtype=object).copy()
        cells[finite] = numbers[finite].tolist()
        typed[col] = pd.Series(cells, index=df.index, dtype=object)
    return pd.DataFrame(typed, columns=df.columns)


class CsvDataLoader(IDataLoader):
    """Loads a header-row CSV into row records.

    Every cell is typed on its own: a cell holding a finite number becomes a
    float, any other text stays a string, so a mostly-numeric column keeps
    its numbers and tokens like ``NA`` are not read as missing. Blank lines
    are skipped and empty cells become ``None``.
    """

    def __init__(self, source: Union[str, Path], sep: str = ","):
        self.source = source if is_remote(source) else Path(source)
        self.sep = sep
        self.logger = LoggerFactory.get_logger(__name__)

    def load_frame(self) -> pd.DataFrame:
        """Read the source as a DataFrame."""
        if isinstance(self.source, Path) and not self.source.exists():
            raise FileNotFoundError(f"Data file not found: {self.source}")

        try:
            df = pd.read_csv(
                self.source, sep=self.sep, dtype=str, keep_default_na=False, na_values=[""],
                skip_blank_lines=True,
            )
        except Exception as e:
            self.logger.error(f"Failed to load {self.source}: {e}")
            raise

        self.logger.info(f"Loaded {self.source}: {df.shape}")
        return type_cells(df)

    def load(self) -> List[Dict[str, Any]]:
        """Read the source as a list of row records."""
        df = self.load_frame()
        if not self.validate_schema(df):
            raise InvalidSchemaError(f"No data rows in {self.source}")
        return to_records(df)

    def validate_schema(self, df: pd.DataFrame) -> bool:
        """At least one column and one row."""
        return len(df.columns) > 0 and len(df) > 0
