from typing import Any, Dict, List

import numpy as np

from tabtrain.core.interfaces import IEncoderStrategy
from tabtrain.core.records import as_finite

EPSILON = 1e-9


class MinMaxStrategy(IEncoderStrategy):
    """
    Min-max scaling of one numeric column: ``(x - min) / (max - min + eps)``.

    A column without any finite value falls back to ``min=0, max=1``.
    Missing or non-numeric cells encode as 0.
    """
    def __init__(self, col: str, epsilon: float = EPSILON):
        self.col = col
        self.epsilon = epsilon
        self.min_: float = 0.0
        self.max_: float = 1.0
        self.n_fitted_: int = 0

    def fit(self, values: List[Any]) -> "MinMaxStrategy":
        finite = [x for x in (as_finite(v) for v in values) if x is not None]
        self.n_fitted_ = len(finite)
        if finite:
            self.min_, self.max_ = min(finite), max(finite)
        else:
            self.min_, self.max_ = 0.0, 1.0
        return self

    def scale(self, value: Any) -> float:
        x = as_finite(value)
        if x is None:
            return 0.0
        return (x - self.min_) / (self.max_ - self.min_ + self.epsilon)

    def transform(self, values: List[Any]) -> np.ndarray:
        return np.array([self.scale(v) for v in values], dtype=np.float32).reshape(-1, 1)

    @property
    def width(self) -> int:
        return 1

    def output_columns(self) -> List[str]:
        return [self.col]

    def get_scaling_info(self) -> Dict[str, Any]:
        """Return information about the fitted range."""
        return {
            "column": self.col,
            "min": self.min_,
            "max": self.max_,
            "n_fitted": self.n_fitted_,
            "fallback": self.n_fitted_ == 0,
        }
