"""Tabular dataset preparation and MLP training."""

from tabtrain.core.exceptions import (
    CapacityExceededError,
    InvalidColumnError,
    InvalidSchemaError,
    PipelineBusyError,
    PipelineStateError,
    TabTrainException,
    TrainingError,
)
from tabtrain.core.utils import PrepareConfig, TrainConfig
from tabtrain.data.schema import ColumnKind, Schema, infer_schema
from tabtrain.dataset.preparer import DatasetPreparer, PreparedDataset, prepare_dataset
from tabtrain.features.text import Vocabulary, build_vocabulary, tokenize
from tabtrain.pipeline.session import PipelineSession

__version__ = "0.1.0"

__all__ = [
    "CapacityExceededError",
    "ColumnKind",
    "DatasetPreparer",
    "InvalidColumnError",
    "InvalidSchemaError",
    "PipelineBusyError",
    "PipelineSession",
    "PipelineStateError",
    "PrepareConfig",
    "PreparedDataset",
    "Schema",
    "TabTrainException",
    "TrainConfig",
    "TrainingError",
    "Vocabulary",
    "build_vocabulary",
    "infer_schema",
    "prepare_dataset",
    "tokenize",
]
