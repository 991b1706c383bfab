"""Core interfaces and utilities."""

from .exceptions import *
from .interfaces import *
from .records import *
from .utils import *

__all__ = [
    # exceptions
    "TabTrainException",
    "InvalidSchemaError",
    "InvalidColumnError",
    "CapacityExceededError",
    "PipelineBusyError",
    "PipelineStateError",
    "TrainingError",
    # interfaces
    "IDataLoader",
    "IDataValidator",
    "ITransformer",
    "ITrainer",
    "IEncoderStrategy",
    # records
    "Row",
    "Rows",
    "as_finite",
    "as_string",
    "is_finite_number",
    "is_missing",
    "to_records",
    # utils
    "LoggerFactory",
    "SeedManager",
    "PathManager",
    "ConfigManager",
    "Timer",
    "PrepareConfig",
    "TrainConfig",
    "clamp_split_pct",
    "clamp_vocab_size",
]
