"""Explicit pipeline state: load -> schema -> prepare -> build -> train -> evaluate."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from tabtrain.core.exceptions import PipelineBusyError, PipelineStateError
from tabtrain.core.records import Rows, to_records
from tabtrain.core.utils import LoggerFactory, PrepareConfig, Timer, TrainConfig
from tabtrain.data.loader import CsvDataLoader
from tabtrain.data.schema import ColumnKind, Schema, infer_schema
from tabtrain.dataset.preparer import DatasetPreparer, PreparedDataset
from tabtrain.features.text.vocabulary import Vocabulary, build_vocabulary
from tabtrain.modeling.evaluator import TrainingEvaluator
from tabtrain.modeling.mlp import EpochCallback, MLPTrainer


class SessionState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class PipelineSession:
    """
    Holds one dataset's artifacts and runs the stages in order.

    Only one stage runs at a time: entering a stage while another is running
    raises ``PipelineBusyError``. Loading new rows discards everything derived
    from the previous ones.
    """

    def __init__(self):
        self.rows: Optional[List[Dict[str, Any]]] = None
        self.schema: Optional[Schema] = None
        self.vocabulary: Optional[Vocabulary] = None
        self.dataset: Optional[PreparedDataset] = None
        self.trainer: Optional[MLPTrainer] = None
        self.metrics: Optional[Dict[str, float]] = None
        self.state = SessionState.IDLE
        self._lock = threading.Lock()
        self.logger = LoggerFactory.get_logger(self.__class__.__name__)

    @contextmanager
    def _single_flight(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise PipelineBusyError(f"Cannot start '{operation}': session is busy")
        self.state = SessionState.BUSY
        try:
            with Timer(self.logger, operation):
                yield
        finally:
            self.state = SessionState.IDLE
            self._lock.release()

    @property
    def busy(self) -> bool:
        return self.state == SessionState.BUSY

    @property
    def history(self) -> List[Dict[str, float]]:
        """Per-epoch training logs of the current model."""
        return list(self.trainer.history) if self.trainer is not None else []

    def _reset_downstream(self) -> None:
        self.schema = None
        self.vocabulary = None
        self.dataset = None
        self.trainer = None
        self.metrics = None

    # ---- stages ----
    def load(self, source: Union[str, Path]) -> Schema:
        """Read a CSV file or URL and infer its schema."""
        with self._single_flight("load"):
            rows = CsvDataLoader(source).load()
            return self._set_rows(rows)

    def load_rows(self, rows: Rows) -> Schema:
        """Use an in-memory row set and infer its schema."""
        with self._single_flight("load"):
            return self._set_rows(to_records(rows))

    def _set_rows(self, rows: List[Dict[str, Any]]) -> Schema:
        self._reset_downstream()
        self.rows = rows
        self.schema = infer_schema(rows)
        self.logger.info(f"Rows: {len(rows)}")
        return self.schema

    def prepare(self, config: Union[PrepareConfig, Dict[str, Any]]) -> PreparedDataset:
        with self._single_flight("prepare"):
            if self.rows is None or self.schema is None:
                raise PipelineStateError("Load data before preparing")
            cfg = config if isinstance(config, PrepareConfig) else PrepareConfig(**config)

            # a new preparation invalidates the previous model
            self.dataset = None
            self.trainer = None
            self.metrics = None
            self.vocabulary = None

            column = self.schema.get(cfg.text_col) if cfg.text_col else None
            if cfg.fit_scope == "all" and column is not None and column.kind == ColumnKind.TEXT:
                self.vocabulary = build_vocabulary(self.rows, cfg.text_col, cfg.vocab_size)

            self.dataset = DatasetPreparer(cfg).prepare(self.rows, schema=self.schema, vocabulary=self.vocabulary)
            self.vocabulary = self.dataset.vocabulary
            return self.dataset

    def build_model(self, config: Optional[Union[TrainConfig, Dict[str, Any]]] = None) -> MLPTrainer:
        with self._single_flight("build"):
            if self.dataset is None:
                raise PipelineStateError("Prepare a dataset before building a model")
            trainer = MLPTrainer(config)
            trainer.build(self.dataset)
            self.trainer = trainer
            self.metrics = None
            return trainer

    def train(self, on_epoch: Optional[EpochCallback] = None) -> List[Dict[str, float]]:
        with self._single_flight("train"):
            if self.dataset is None or self.trainer is None:
                raise PipelineStateError("Build a model before training")
            return self.trainer.train(self.dataset, on_epoch=on_epoch)

    def evaluate(self) -> Dict[str, float]:
        with self._single_flight("evaluate"):
            self._require_trained()
            self.metrics = TrainingEvaluator().evaluate(self.trainer, self.dataset)
            return self.metrics

    def predictions(self, k: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._single_flight("predictions"):
            self._require_trained()
            return TrainingEvaluator().prediction_table(self.trainer, self.dataset, k)

    def _require_trained(self) -> None:
        if self.dataset is None or self.trainer is None or not self.trainer.history:
            raise PipelineStateError("Train the model before evaluating")

    def summary(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"state": self.state.value, "rows": len(self.rows) if self.rows is not None else 0}
        if self.schema is not None:
            info["columns"] = len(self.schema)
            info.update(self.schema.kind_counts())
        if self.dataset is not None:
            info.update({
                "train": self.dataset.n_train,
                "test": self.dataset.n_test,
                "inputs": self.dataset.input_dim,
                "task": "classification" if self.dataset.is_classification else "regression",
            })
        if self.metrics is not None:
            info["metrics"] = dict(self.metrics)
        return info
