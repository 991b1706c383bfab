from __future__ import annotations
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.base import BaseEstimator, TransformerMixin

from tabtrain.core.interfaces import ITransformer
from tabtrain.core.records import Row, Rows, to_records
from tabtrain.core.utils import LoggerFactory


class BaseTransform(BaseEstimator, TransformerMixin, ITransformer):
    """
    Small base for row -> vector encoders.

    What you get:
      - logger
      - fitted-state handling & guard
      - rows normalised to plain dict records (DataFrames accepted)
      - fit_transform / transform over a row set built on transform_row
      - sklearn compatibility (get/set params through BaseEstimator)
    """

    def __init__(self, *, name: Optional[str] = None):
        self.logger = LoggerFactory.get_logger(name or self.__class__.__name__)
        self.is_fitted: bool = False
        self.dim_: int = 0

    # ---- public API ----
    def fit(self, X: Rows, y: Optional[Any] = None) -> "BaseTransform":
        self.is_fitted = True
        return self

    def transform_row(self, row: Row) -> np.ndarray:
        raise NotImplementedError

    def transform(self, X: Rows) -> np.ndarray:
        self._require_fitted()
        records = self._as_records(X)
        out = np.zeros((len(records), self.dim_), dtype=np.float32)
        for i, row in enumerate(records):
            out[i] = self.transform_row(row)
        return out

    def fit_transform(self, X: Rows, y: Optional[Any] = None) -> np.ndarray:
        records = self._as_records(X)
        return self.fit(records, y).transform(records)

    # ---- convenience ----
    @property
    def dim(self) -> int:
        """Width of the vectors this transform produces."""
        return self.dim_

    def get_feature_names(self) -> List[str]:
        return []

    def reset(self) -> None:
        """Clear fitted state."""
        self.is_fitted = False
        self.dim_ = 0

    # ---- helpers for subclasses ----
    def _require_fitted(self) -> None:
        if not self.is_fitted:
            raise ValueError(f"{self.__class__.__name__} must be fitted before transform")

    @staticmethod
    def _as_records(X: Any) -> List[Dict[str, Any]]:
        if isinstance(X, list) and all(isinstance(r, dict) for r in X):
            return X
        return to_records(X)
