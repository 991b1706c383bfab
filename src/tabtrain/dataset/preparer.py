"""Dataset preparation: rows -> encoded, shuffled, split train/test matrices."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from tabtrain.core.exceptions import InvalidColumnError, InvalidSchemaError
from tabtrain.core.interfaces import IDataValidator
from tabtrain.core.records import Row, Rows, as_finite, as_string, to_records
from tabtrain.core.utils import LoggerFactory, PrepareConfig, clamp_split_pct
from tabtrain.data.schema import ColumnKind, Schema, infer_schema
from tabtrain.data.validate import DatasetValidator
from tabtrain.features.encoding.tabular import TabularEncoder
from tabtrain.features.text.encoder import TextEncoder
from tabtrain.features.text.vocabulary import Vocabulary

AUTO_CLASSIFICATION_MAX_UNIQUE = 20


@dataclass
class PreparedDataset:
    """Encoded train/test partitions plus the artifacts that produced them."""

    X_train: np.ndarray
    Y_train: np.ndarray
    X_test: np.ndarray
    Y_test: np.ndarray
    is_classification: bool
    n_classes: int
    label_map: Optional[Dict[str, int]]
    input_dim: int
    class_weights: Optional[List[float]] = None
    feature_names: List[str] = field(default_factory=list)
    schema: Optional[Schema] = field(default=None, repr=False)
    vocabulary: Optional[Vocabulary] = field(default=None, repr=False)
    tabular_encoder: Optional[TabularEncoder] = field(default=None, repr=False)

    @property
    def n_train(self) -> int:
        return int(self.X_train.shape[0])

    @property
    def n_test(self) -> int:
        return int(self.X_test.shape[0])

    @property
    def tabular_dim(self) -> int:
        return self.input_dim - (self.vocabulary.size if self.vocabulary is not None else 0)

    def inverse_label_map(self) -> Dict[int, str]:
        return {i: label for label, i in (self.label_map or {}).items()}

    def decode_label(self, index: int) -> str:
        """Original class label for a class index."""
        try:
            return self.inverse_label_map()[int(index)]
        except KeyError:
            raise KeyError(f"No class with index {index}") from None

    def class_weight_dict(self) -> Optional[Dict[int, float]]:
        if self.class_weights is None:
            return None
        return {i: w for i, w in enumerate(self.class_weights)}


# ---- pure stages ----

def determine_task(schema: Schema, target_col: str, task: str = "auto") -> bool:
    """True for classification.

    ``auto`` picks classification for a non-numeric target with at most 20
    distinct sampled values; numeric targets always regress.
    """
    column = schema[target_col]
    if task == "classification":
        return True
    if task == "regression":
        return False
    return column.kind != ColumnKind.NUMERIC and column.unique_count <= AUTO_CLASSIFICATION_MAX_UNIQUE


def build_label_map(rows: Rows, target_col: str) -> Dict[str, int]:
    """Distinct stringified target values -> class index, first-encountered order."""
    labels = dict.fromkeys(as_string(row.get(target_col)) for row in rows)
    return {label: i for i, label in enumerate(labels)}


def shuffle_rows(rows: Sequence[Row], rng: Optional[np.random.Generator] = None) -> List[Row]:
    """Uniform random permutation of the rows (Fisher-Yates via numpy)."""
    rng = rng if rng is not None else np.random.default_rng()
    return [rows[i] for i in rng.permutation(len(rows))]


def split_index(n_rows: int, split_pct: float) -> int:
    return int(math.floor(n_rows * clamp_split_pct(split_pct)))


def encode_labels(rows: Rows, target_col: str, label_map: Optional[Dict[str, int]]) -> np.ndarray:
    """One-hot rows for classification, a single numeric column for regression."""
    if label_map is not None:
        Y = np.zeros((len(rows), len(label_map)), dtype=np.float32)
        for i, row in enumerate(rows):
            Y[i, label_map[as_string(row.get(target_col))]] = 1.0
        return Y

    Y = np.zeros((len(rows), 1), dtype=np.float32)
    for i, row in enumerate(rows):
        value = as_finite(row.get(target_col))
        Y[i, 0] = value if value is not None else 0.0
    return Y


def compute_class_weights(Y_train: np.ndarray, n_classes: int) -> List[float]:
    """``max(count) / count[i]`` per class; 1 for classes absent from ``Y_train``."""
    if n_classes == 0:
        return []
    counts = Y_train.reshape(-1, n_classes).sum(axis=0)
    max_count = float(counts.max())
    return [max_count / float(c) if c > 0 else 1.0 for c in counts]


class DatasetPreparer:
    """
    Orchestrates one preparation run.

    Order of work: task and label map over the full row set, one shuffle,
    encoder fitting (full set or training partition, see ``fit_scope``), row
    encoding, split, class weights from the training partition. Fatal input
    problems are raised before any of it starts.
    """

    def __init__(self, config: Union[PrepareConfig, Dict[str, Any]],
                 validator: Optional[IDataValidator] = None):
        self.config = config if isinstance(config, PrepareConfig) else PrepareConfig(**config)
        self.validator = validator or DatasetValidator()
        self.logger = LoggerFactory.get_logger(self.__class__.__name__)

    def resolve_feature_cols(self, schema: Schema) -> List[str]:
        cfg = self.config
        candidates = cfg.feature_cols if cfg.feature_cols is not None else schema.names
        excluded = set(cfg.exclude_cols) | {cfg.target_col}
        cols = [c for c in dict.fromkeys(candidates) if c not in excluded]
        for col in cols:
            if col not in schema:
                raise InvalidColumnError(col, f"Feature column '{col}' not found in schema")
        return cols

    def resolve_text_col(self, schema: Schema) -> Optional[str]:
        text_col = self.config.text_col
        if text_col is None:
            return None
        column = schema.get(text_col)
        if column is None or column.kind != ColumnKind.TEXT:
            self.logger.warning(
                f"Text column '{text_col}' is "
                + ("missing from the schema" if column is None else f"{column.kind.value}, not text")
                + "; no bag-of-words features"
            )
            return None
        return text_col

    def prepare(self, rows: Rows, schema: Optional[Schema] = None,
                vocabulary: Optional[Vocabulary] = None) -> PreparedDataset:
        records = to_records(rows)
        if not records:
            raise InvalidSchemaError("Cannot prepare an empty row set")
        if schema is None:
            schema = infer_schema(records)

        cfg = self.config
        if cfg.target_col not in schema:
            raise InvalidColumnError(cfg.target_col, f"Target column '{cfg.target_col}' not found in schema")
        feature_cols = self.resolve_feature_cols(schema)
        text_col = self.resolve_text_col(schema)
        tabular_cols = [c for c in feature_cols if c != cfg.text_col]

        is_classification = determine_task(schema, cfg.target_col, cfg.task)
        label_map = build_label_map(records, cfg.target_col) if is_classification else None
        n_classes = len(label_map) if label_map is not None else 0

        rng = np.random.default_rng(cfg.seed)
        shuffled = shuffle_rows(records, rng)
        n_rows = len(shuffled)
        split = split_index(n_rows, cfg.split_pct)

        # "all" keeps the original row order so category order is first-encountered in the input
        fit_rows = records if cfg.fit_scope == "all" else shuffled[:split]

        tabular = TabularEncoder(schema).fit(fit_rows, feature_cols=tabular_cols)
        blocks = [tabular.transform(shuffled)]
        feature_names = tabular.get_feature_names()

        fitted_vocab: Optional[Vocabulary] = None
        if text_col is not None:
            text = TextEncoder(text_col, vocabulary=vocabulary, vocab_size=cfg.vocab_size).fit(fit_rows)
            fitted_vocab = text.vocabulary_
            blocks.append(text.transform(shuffled))
            feature_names.extend(text.get_feature_names())

        X = np.hstack(blocks) if len(blocks) > 1 else blocks[0]
        Y = encode_labels(shuffled, cfg.target_col, label_map)
        input_dim = tabular.dim + (fitted_vocab.size if fitted_vocab is not None else 0)

        class_weights = None
        if is_classification and cfg.class_weight_mode == "auto":
            class_weights = compute_class_weights(Y[:split], n_classes)

        dataset = PreparedDataset(
            X_train=X[:split], Y_train=Y[:split],
            X_test=X[split:], Y_test=Y[split:],
            is_classification=is_classification,
            n_classes=n_classes,
            label_map=label_map,
            input_dim=input_dim,
            class_weights=class_weights,
            feature_names=feature_names,
            schema=schema,
            vocabulary=fitted_vocab,
            tabular_encoder=tabular,
        )
        self.validator.validate(dataset)

        self.logger.info(
            f"Prepared {n_rows} rows: train={dataset.n_train}, test={dataset.n_test}, "
            f"input_dim={input_dim}, task={'classification' if is_classification else 'regression'}"
            + (f", classes={n_classes}" if is_classification else "")
        )
        return dataset


def prepare_dataset(rows: Rows, config: Union[PrepareConfig, Dict[str, Any]],
                    schema: Optional[Schema] = None,
                    vocabulary: Optional[Vocabulary] = None) -> PreparedDataset:
    return DatasetPreparer(config).prepare(rows, schema=schema, vocabulary=vocabulary)
