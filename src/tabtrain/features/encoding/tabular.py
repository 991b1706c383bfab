from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from tabtrain.core.interfaces import IEncoderStrategy
from tabtrain.core.records import Row, Rows
from tabtrain.data.schema import Schema
from tabtrain.features.base import BaseTransform
from tabtrain.features.encoding.factory import build_encoder
from tabtrain.features.encoding.strategies import MAX_CATEGORIES, OneHotStrategy
from tabtrain.features.scaling.scaler import EPSILON, MinMaxStrategy


class TabularEncoder(BaseTransform):
    """
    Numeric + categorical columns -> one fixed-length vector.

    The output layout is the ordered list of fitted column encoders: one
    min-max slot per numeric column, one one-hot block per categorical column,
    in ``feature_cols`` order. Text-kind columns contribute nothing here.
    """

    def __init__(self, schema: Schema, max_categories: int = MAX_CATEGORIES, epsilon: float = EPSILON):
        super().__init__(name="TabularEncoder")
        self.schema = schema
        self.max_categories = max_categories
        self.epsilon = epsilon
        self._encoders: List[IEncoderStrategy] = []
        self.skipped_: List[str] = []

    def fit(self, X: Rows, y: Optional[Any] = None, feature_cols: Optional[Sequence[str]] = None) -> "TabularEncoder":
        records = self._as_records(X)
        if feature_cols is None:
            feature_cols = self.schema.names

        cfg = {"max_categories": self.max_categories, "epsilon": self.epsilon}
        self._encoders = []
        self.skipped_ = []
        for col in feature_cols:
            kind = self.schema[col].kind  # InvalidColumnError for unknown columns
            enc = build_encoder(col, kind, cfg)
            if enc is None:
                self.skipped_.append(col)
                continue
            enc.fit([row.get(col) for row in records])
            if isinstance(enc, OneHotStrategy) and enc.n_dropped_:
                self.logger.debug(
                    f"Column '{col}': kept {enc.width} categories, dropped {enc.n_dropped_} beyond the cap"
                )
            self._encoders.append(enc)

        self.dim_ = sum(enc.width for enc in self._encoders)
        self.is_fitted = True
        self.logger.info(
            f"Tabular encoder: {len(self.categories_)} categorical, {len(self.numeric_stats_)} numeric, "
            f"dim={self.dim_}" + (f", skipped text columns {self.skipped_}" if self.skipped_ else "")
        )
        return self

    def transform_row(self, row: Row) -> np.ndarray:
        self._require_fitted()
        if not self._encoders:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate([enc.encode(row.get(enc.col)) for enc in self._encoders])

    def transform(self, X: Rows) -> np.ndarray:
        """Encode a row set column by column; same layout as ``transform_row``."""
        self._require_fitted()
        records = self._as_records(X)
        if not self._encoders:
            return np.zeros((len(records), 0), dtype=np.float32)
        blocks = [enc.transform([row.get(enc.col) for row in records]) for enc in self._encoders]
        return np.hstack(blocks).astype(np.float32, copy=False)

    # ---- fitted artifacts ----
    @property
    def encoded_columns_(self) -> List[Tuple[str, str]]:
        """(column, 'categorical' | 'numeric') in output order."""
        return [
            (enc.col, "categorical" if isinstance(enc, OneHotStrategy) else "numeric")
            for enc in self._encoders
        ]

    @property
    def categories_(self) -> Dict[str, List[str]]:
        return {enc.col: list(enc.categories_) for enc in self._encoders if isinstance(enc, OneHotStrategy)}

    @property
    def numeric_stats_(self) -> Dict[str, Dict[str, float]]:
        return {
            enc.col: {"min": enc.min_, "max": enc.max_}
            for enc in self._encoders
            if isinstance(enc, MinMaxStrategy)
        }

    def get_feature_names(self) -> List[str]:
        names: List[str] = []
        for enc in self._encoders:
            names.extend(enc.output_columns())
        return names
