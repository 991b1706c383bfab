from typing import Any, List, Optional

import numpy as np
from sklearn.preprocessing import OneHotEncoder

from tabtrain.core.interfaces import IEncoderStrategy
from tabtrain.core.records import as_string

MAX_CATEGORIES = 200
# stringified missing values never become categories
_EXCLUDED = frozenset({"undefined", "null"})


class OneHotStrategy(IEncoderStrategy):
    """
    One-hot block over the distinct values seen at fit time.

    Categories keep first-encountered order and are capped at
    ``max_categories``; values beyond the cap, and values never seen, encode
    as an all-zero block.
    """
    def __init__(self, col: str, max_categories: int = MAX_CATEGORIES):
        self.col = col
        self.max_categories = max_categories
        self.categories_: List[str] = []
        self.n_dropped_: int = 0
        self.encoder_: Optional[OneHotEncoder] = None

    def fit(self, values: List[Any]) -> "OneHotStrategy":
        distinct = [v for v in dict.fromkeys(as_string(v) for v in values) if v not in _EXCLUDED]
        self.categories_ = distinct[: self.max_categories]
        self.n_dropped_ = len(distinct) - len(self.categories_)

        self.encoder_ = None
        if self.categories_:
            # explicit categories pin the column order to first-encountered
            self.encoder_ = OneHotEncoder(
                categories=[np.array(self.categories_, dtype=object)],
                handle_unknown="ignore",
                sparse_output=False,
                dtype=np.float32,
            )
            self.encoder_.fit(np.array(self.categories_, dtype=object).reshape(-1, 1))
        return self

    def transform(self, values: List[Any]) -> np.ndarray:
        if self.encoder_ is None or not len(values):
            return np.zeros((len(values), self.width), dtype=np.float32)
        column = np.array([as_string(v) for v in values], dtype=object).reshape(-1, 1)
        return self.encoder_.transform(column)

    @property
    def width(self) -> int:
        return len(self.categories_)

    def output_columns(self) -> List[str]:
        return [f"{self.col}={c}" for c in self.categories_]
