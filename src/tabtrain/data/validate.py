"""Consistency checks for prepared datasets."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import numpy as np

from tabtrain.core.interfaces import IDataValidator
from tabtrain.core.utils import LoggerFactory

if TYPE_CHECKING:
    from tabtrain.dataset.preparer import PreparedDataset


class DatasetValidator(IDataValidator):
    """Checks the shape contract handed to the trainer."""

    def __init__(self):
        self.logger = LoggerFactory.get_logger(__name__)

    def validate(self, dataset: "PreparedDataset") -> bool:
        errors: List[str] = []
        label_width = dataset.n_classes if dataset.is_classification else 1

        for part, X, Y in (
            ("train", dataset.X_train, dataset.Y_train),
            ("test", dataset.X_test, dataset.Y_test),
        ):
            errors.extend(self._check_partition(part, X, Y, dataset.input_dim, label_width))
            if dataset.is_classification and len(Y):
                hot = (Y == 1).sum(axis=1)
                if not np.all(hot == 1) or not np.all(Y.sum(axis=1) == 1):
                    errors.append(f"{part}: every label row must contain exactly one 1")

        if dataset.is_classification:
            if dataset.label_map is None or sorted(dataset.label_map.values()) != list(range(dataset.n_classes)):
                errors.append("label map is not a bijection onto [0, n_classes)")
        if dataset.class_weights is not None and len(dataset.class_weights) != dataset.n_classes:
            errors.append(
                f"class_weights has {len(dataset.class_weights)} entries, expected {dataset.n_classes}"
            )

        if errors:
            raise ValueError("Prepared dataset is inconsistent: " + "; ".join(errors))

        self.logger.debug("Prepared dataset passed validation")
        return True

    def _check_partition(self, part: str, X: np.ndarray, Y: np.ndarray,
                         input_dim: int, label_width: int) -> List[str]:
        errors = []
        if X.ndim != 2 or Y.ndim != 2:
            return [f"{part}: X and Y must be 2-D, got {X.ndim}-D and {Y.ndim}-D"]
        if X.shape[0] != Y.shape[0]:
            errors.append(f"{part}: {X.shape[0]} feature rows vs {Y.shape[0]} label rows")
        if X.shape[1] != input_dim:
            errors.append(f"{part}: X has {X.shape[1]} columns, expected {input_dim}")
        if Y.shape[1] != label_width:
            errors.append(f"{part}: Y has {Y.shape[1]} columns, expected {label_width}")
        return errors
