"""Test-partition metrics and prediction tables for a trained MLP."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.metrics import accuracy_score, log_loss, mean_absolute_error

from tabtrain.core.exceptions import TrainingError
from tabtrain.core.utils import LoggerFactory
from tabtrain.dataset.preparer import PreparedDataset
from tabtrain.modeling.mlp import MLPTrainer, class_targets

DEFAULT_TOP_K_CLASSIFICATION = 12
DEFAULT_TOP_K_REGRESSION = 20


class TrainingEvaluator:
    """Scores a trained model on the held-out partition."""

    def __init__(self):
        self.logger = LoggerFactory.get_logger(__name__)

    def evaluate(self, trainer: MLPTrainer, dataset: PreparedDataset) -> Dict[str, float]:
        """``{loss, acc}`` for classification, ``{loss, mae}`` for regression (loss is the MAE)."""
        if dataset.n_test == 0:
            raise TrainingError("Test partition is empty; lower split_pct or add rows")

        pred = trainer.predict(dataset.X_test)
        y_true = class_targets(dataset, dataset.Y_test)
        if dataset.is_classification:
            metrics = {
                "loss": float(log_loss(y_true, pred, labels=np.arange(dataset.n_classes))),
                "acc": float(accuracy_score(y_true, pred.argmax(axis=1))),
            }
        else:
            mae = float(mean_absolute_error(y_true, pred[:, 0]))
            metrics = {"loss": mae, "mae": mae}
        self.logger.info(f"Test metrics: {metrics}")
        return metrics

    def prediction_table(self, trainer: MLPTrainer, dataset: PreparedDataset,
                         k: Optional[int] = None) -> List[Dict[str, Any]]:
        """First ``k`` test rows with true and predicted values.

        Classification rows carry decoded labels and the predicted class
        probability; regression rows carry raw values.
        """
        if dataset.n_test == 0:
            return []
        if k is None:
            k = DEFAULT_TOP_K_CLASSIFICATION if dataset.is_classification else DEFAULT_TOP_K_REGRESSION
        n = min(k, dataset.n_test)
        pred = trainer.predict(dataset.X_test[:n])

        rows: List[Dict[str, Any]] = []
        for i in range(n):
            if dataset.is_classification:
                pred_idx = int(pred[i].argmax())
                true_idx = int(dataset.Y_test[i].argmax())
                rows.append({
                    "#": i + 1,
                    "true": dataset.decode_label(true_idx),
                    "pred": dataset.decode_label(pred_idx),
                    "prob": float(pred[i, pred_idx]),
                })
            else:
                rows.append({
                    "#": i + 1,
                    "true": float(dataset.Y_test[i, 0]),
                    "pred": float(pred[i, 0]),
                })
        return rows
