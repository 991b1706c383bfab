"""Feed-forward network trainer for prepared datasets (scikit-learn MLP)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import joblib
import numpy as np
from sklearn.base import BaseEstimator
from sklearn.metrics import accuracy_score, log_loss, mean_absolute_error
from sklearn.neural_network import MLPClassifier, MLPRegressor

from tabtrain.core.exceptions import TrainingError
from tabtrain.core.interfaces import ITrainer
from tabtrain.core.utils import LoggerFactory, TrainConfig
from tabtrain.dataset.preparer import PreparedDataset

EpochCallback = Callable[[int, Dict[str, float]], None]


def parse_architecture(arch: str) -> Tuple[int, ...]:
    """``"128-64"`` -> ``(128, 64)``."""
    try:
        sizes = tuple(int(part) for part in str(arch).split("-") if part.strip())
    except ValueError:
        raise ValueError(f"Invalid architecture '{arch}': expected sizes like '128-64'") from None
    if not sizes or any(s <= 0 for s in sizes):
        raise ValueError(f"Invalid architecture '{arch}': layer sizes must be positive")
    return sizes


def class_targets(dataset: PreparedDataset, Y: np.ndarray) -> np.ndarray:
    """Class indices for one-hot rows, the single column for regression."""
    if dataset.is_classification:
        return Y.argmax(axis=1)
    return Y[:, 0]


class MLPTrainer(ITrainer):
    """Builds, trains and persists a small MLP for a prepared dataset."""

    def __init__(self, config: Optional[Union[TrainConfig, Dict[str, Any]]] = None):
        if config is None:
            config = TrainConfig()
        self.config = config if isinstance(config, TrainConfig) else TrainConfig(**config)
        self.model: Optional[BaseEstimator] = None
        self.is_classification: bool = False
        self.classes_: Optional[np.ndarray] = None
        self.history: List[Dict[str, float]] = []
        self.logger = LoggerFactory.get_logger(self.__class__.__name__)

    def build(self, dataset: PreparedDataset) -> BaseEstimator:
        cfg = self.config
        hidden = parse_architecture(cfg.arch)
        if cfg.drop > 0:
            self.logger.info(f"Dropout {cfg.drop} is not available for scikit-learn MLPs; using L2 alpha={cfg.alpha}")

        params = dict(
            hidden_layer_sizes=hidden,
            activation="relu",
            solver="adam",
            alpha=cfg.alpha,
            batch_size=cfg.batch,
            learning_rate_init=cfg.lr,
            random_state=cfg.seed,
        )
        self.is_classification = dataset.is_classification
        if dataset.is_classification:
            if dataset.n_classes < 2:
                raise TrainingError(
                    f"Classification needs at least two classes, got {dataset.n_classes}. "
                    "Pick another target or use task=regression."
                )
            self.classes_ = np.arange(dataset.n_classes)
            self.model = MLPClassifier(**params)
        else:
            self.classes_ = None
            self.model = MLPRegressor(**params)

        self.history = []
        self.logger.info(
            f"Built MLP {cfg.arch} for input_dim={dataset.input_dim}, "
            + (f"classes={dataset.n_classes}" if dataset.is_classification else "regression")
        )
        return self.model

    def train(self, dataset: PreparedDataset, on_epoch: Optional[EpochCallback] = None) -> List[Dict[str, float]]:
        if self.model is None:
            self.build(dataset)
        cfg = self.config

        X = dataset.X_train
        y = class_targets(dataset, dataset.Y_train)
        if len(X) == 0:
            raise TrainingError("Training partition is empty; add rows or raise split_pct")

        # hold out the tail of the training partition, as a validation split does
        n_val = int(len(X) * cfg.validation_split)
        if n_val == 0 or n_val == len(X):
            X_fit, y_fit, X_val, y_val = X, y, None, None
        else:
            X_fit, y_fit = X[:-n_val], y[:-n_val]
            X_val, y_val = X[-n_val:], y[-n_val:]

        if dataset.class_weights is not None:
            self.logger.info(f"Class weights (not applied by the MLP): {dataset.class_weights}")

        rng = np.random.default_rng(cfg.seed)
        for epoch in range(cfg.epochs):
            order = rng.permutation(len(X_fit))
            try:
                for start in range(0, len(order), cfg.batch):
                    idx = order[start:start + cfg.batch]
                    if self.is_classification:
                        self.model.partial_fit(X_fit[idx], y_fit[idx], classes=self.classes_)
                    else:
                        self.model.partial_fit(X_fit[idx], y_fit[idx])
            except ValueError as e:
                raise TrainingError(f"Training failed at epoch {epoch + 1}: {e}") from e

            logs = self._epoch_logs(X_fit, y_fit, X_val, y_val)
            self.history.append(logs)
            self.logger.debug(f"Epoch {epoch + 1}/{cfg.epochs}: {logs}")
            if on_epoch is not None:
                on_epoch(epoch, logs)

        self.logger.info(f"Trained {cfg.epochs} epochs on {len(X_fit)} rows")
        return self.history

    def _scores(self, X: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
        if self.is_classification:
            proba = self.model.predict_proba(X)
            loss = log_loss(y, proba, labels=self.classes_)
            return float(loss), float(accuracy_score(y, proba.argmax(axis=1)))
        # regression loss is the mean absolute error, so loss and mae coincide
        mae = float(mean_absolute_error(y, self.model.predict(X)))
        return mae, mae

    def _epoch_logs(self, X_fit, y_fit, X_val, y_val) -> Dict[str, float]:
        metric = "acc" if self.is_classification else "mae"
        loss, score = self._scores(X_fit, y_fit)
        logs = {"loss": loss, metric: score}
        if X_val is not None:
            val_loss, val_score = self._scores(X_val, y_val)
            logs.update({"val_loss": val_loss, f"val_{metric}": val_score})
        return logs

    # ---- inference ----
    def _require_model(self) -> BaseEstimator:
        if self.model is None or not hasattr(self.model, "n_layers_"):
            raise TrainingError("Model must be built and trained before prediction")
        return self.model

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Class probabilities (classification) or a single output column (regression)."""
        model = self._require_model()
        if self.is_classification:
            return model.predict_proba(X)
        return np.asarray(model.predict(X), dtype=float).reshape(-1, 1)

    def save(self, path: Union[str, Path]) -> None:
        """Save trainer (model + history) to disk."""
        self._require_model()
        joblib.dump(self, path)
        self.logger.info(f"Saved model to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "MLPTrainer":
        """Load trainer from disk."""
        return joblib.load(path)
