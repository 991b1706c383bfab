"""Core interfaces for the tabtrain pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from tabtrain.core.records import Row, Rows


class IDataLoader(ABC):
    """Interface for data loading components."""

    @abstractmethod
    def load(self) -> List[Dict[str, Any]]:
        """Load rows from source."""
        pass

    @abstractmethod
    def validate_schema(self, df: pd.DataFrame) -> bool:
        """Validate that data conforms to expected schema."""
        pass


class ITransformer(ABC):
    """Interface for row-to-vector transformation components."""

    @abstractmethod
    def fit(self, X: Rows, y: Optional[Any] = None) -> "ITransformer":
        """Fit transformer to rows."""
        pass

    @abstractmethod
    def transform(self, X: Rows) -> np.ndarray:
        """Transform rows into a feature matrix."""
        pass

    @abstractmethod
    def transform_row(self, row: Row) -> np.ndarray:
        """Transform a single row into a feature vector."""
        pass


class ITrainer(ABC):
    """Interface for model training components."""

    @abstractmethod
    def build(self, dataset: Any) -> Any:
        """Build an untrained model sized for the dataset."""
        pass

    @abstractmethod
    def train(self, dataset: Any,
              on_epoch: Optional[Callable[[int, Dict[str, float]], None]] = None) -> List[Dict[str, float]]:
        """Train on the dataset's training partition and return per-epoch logs."""
        pass


class IDataValidator(ABC):
    """Interface for data validation components."""

    @abstractmethod
    def validate(self, dataset: Any) -> bool:
        """Validate a prepared dataset."""
        pass


class IEncoderStrategy(ABC):
    """One tabular column encoded into a fixed-width block."""

    col: str

    @abstractmethod
    def fit(self, values: List[Any]) -> "IEncoderStrategy":
        """Learn the column's encoding from its raw values."""
        pass

    @abstractmethod
    def transform(self, values: List[Any]) -> np.ndarray:
        """Encode a column of raw values into a ``(len(values), width)`` block."""
        pass

    def encode(self, value: Any) -> np.ndarray:
        return self.transform([value])[0]

    @property
    @abstractmethod
    def width(self) -> int:
        pass

    @abstractmethod
    def output_columns(self) -> List[str]:
        pass
