"""Core utilities for logging, seeding, paths, and configuration management."""

from __future__ import annotations

import hashlib
import json
import logging
import random
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator

SPLIT_PCT_MIN = 0.5
SPLIT_PCT_MAX = 0.95
DEFAULT_SPLIT_PCT = 0.8

VOCAB_SIZE_MIN = 100
VOCAB_SIZE_MAX = 5000
DEFAULT_VOCAB_SIZE = 500


class LoggerFactory:
    """Factory for creating structured loggers with consistent formatting."""

    _loggers: Dict[str, logging.Logger] = {}
    _level: int = logging.INFO

    @classmethod
    def get_logger(cls, name: str, level: Optional[int] = None) -> logging.Logger:
        """Get or create a logger with standard formatting."""
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            logger.setLevel(level if level is not None else cls._level)

            # Don't add handlers if they already exist
            if not logger.handlers:
                handler = logging.StreamHandler(sys.stdout)
                formatter = logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                )
                handler.setFormatter(formatter)
                logger.addHandler(handler)

            cls._loggers[name] = logger

        return cls._loggers[name]

    @classmethod
    def set_level(cls, level: int) -> None:
        """Change the level of every logger handed out so far and of future ones."""
        cls._level = level
        for logger in cls._loggers.values():
            logger.setLevel(level)


class SeedManager:
    """Manages global random seeds for reproducibility."""

    _current_seed: Optional[int] = None

    @classmethod
    def set_seed(cls, seed: int) -> None:
        """Set global random seed for random and numpy."""
        cls._current_seed = seed
        random.seed(seed)
        np.random.seed(seed)

    @classmethod
    def get_seed(cls) -> Optional[int]:
        """Get current seed."""
        return cls._current_seed


class PathManager:
    """Manages project paths and directory creation."""

    def __init__(self, project_root: Optional[Path] = None):
        if project_root is None:
            # utils.py -> core -> tabtrain -> src -> project root
            self.project_root = Path(__file__).resolve().parents[3]
        else:
            self.project_root = Path(project_root)
        self.config_dir = self.project_root / "configs"
        self.artifacts_dir = self.project_root / "artifacts"

    def create_run_directory(self, timestamp: Optional[str] = None) -> Path:
        """Create timestamped run directory for artifacts."""
        if timestamp is None:
            timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

        run_dir = self.artifacts_dir / timestamp
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_dir: Path):
        self.config_dir = Path(config_dir)
        self._cache: Dict[str, Any] = {}

    def load_config(self, config_name: str, use_cache: bool = True) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if use_cache and config_name in self._cache:
            return self._cache[config_name]

        config_path = Path(config_name)
        if not config_path.is_absolute() and not config_path.exists():
            config_path = self.config_dir / config_path
        if config_path.suffix not in (".yaml", ".yml"):
            config_path = config_path.with_suffix(".yaml")
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with config_path.open("r") as f:
            config = yaml.safe_load(f) or {}

        if use_cache:
            self._cache[config_name] = config

        return config

    def get_config_hash(self, config: Dict[str, Any]) -> str:
        """Generate hash of configuration for reproducibility."""
        config_str = json.dumps(config, sort_keys=True, default=str)
        return hashlib.md5(config_str.encode()).hexdigest()


class Timer:
    """Context manager for timing operations."""

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = datetime.now().timestamp()
        self.logger.info(f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = datetime.now().timestamp() - self.start_time
            status = "Completed" if exc_type is None else "Aborted"
            self.logger.info(f"{status} {self.operation} in {duration:.2f}s")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_vocab_size(value: Any) -> int:
    """Coerce a requested vocabulary size into [100, 5000].

    Non-numeric input and zero give the default; negatives clamp to the minimum.
    """
    try:
        size = float(value)
    except (TypeError, ValueError):
        return DEFAULT_VOCAB_SIZE
    if not np.isfinite(size) or int(size) == 0:
        return DEFAULT_VOCAB_SIZE
    return int(clamp(size, VOCAB_SIZE_MIN, VOCAB_SIZE_MAX))


def clamp_split_pct(value: Any) -> float:
    """Coerce a train share into [0.5, 0.95].

    Values above 1 are read as percentages (``80`` -> ``0.8``). Non-numeric
    input and zero give the default; negatives clamp to the minimum.
    """
    try:
        pct = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SPLIT_PCT
    if not np.isfinite(pct) or pct == 0:
        return DEFAULT_SPLIT_PCT
    if pct > 1:
        pct = pct / 100.0
    return clamp(pct, SPLIT_PCT_MIN, SPLIT_PCT_MAX)


# Configuration schemas using Pydantic
_TASK_ALIASES = {
    "auto": "auto",
    "classification": "classification",
    "clf": "classification",
    "regression": "regression",
    "reg": "regression",
}


class PrepareConfig(BaseModel):
    """Schema for dataset preparation.

    Every field is normalised on construction, so downstream stages can use
    the values without re-checking them.
    """
    target_col: str = Field(..., description="Target column name")
    feature_cols: Optional[List[str]] = Field(
        None, description="Feature columns; defaults to every column except target and excluded ones"
    )
    exclude_cols: List[str] = Field(default_factory=list, description="Columns never used as features")
    task: Literal["auto", "classification", "regression"] = Field("auto", description="Task type")
    split_pct: float = Field(DEFAULT_SPLIT_PCT, description="Train share, clamped to [0.5, 0.95]")
    class_weight_mode: Literal["off", "auto"] = Field("off", description="Class weight computation")
    text_col: Optional[str] = Field(None, description="Text column encoded as bag-of-words")
    vocab_size: int = Field(DEFAULT_VOCAB_SIZE, description="Vocabulary size, clamped to [100, 5000]")
    seed: Optional[int] = Field(None, description="Seed for the row shuffle")
    fit_scope: Literal["all", "train"] = Field(
        "all", description="Rows used to fit encoders: the full set or the training partition"
    )

    @field_validator("task", mode="before")
    @classmethod
    def _normalise_task(cls, value: Any) -> str:
        key = str(value or "auto").strip().lower()
        if key not in _TASK_ALIASES:
            raise ValueError(f"Unknown task '{value}'. Use auto, classification or regression")
        return _TASK_ALIASES[key]

    @field_validator("split_pct", mode="before")
    @classmethod
    def _clamp_split(cls, value: Any) -> float:
        return clamp_split_pct(value)

    @field_validator("vocab_size", mode="before")
    @classmethod
    def _clamp_vocab(cls, value: Any) -> int:
        return clamp_vocab_size(value)

    @field_validator("class_weight_mode", mode="before")
    @classmethod
    def _normalise_class_weight(cls, value: Any) -> str:
        if value is None or value is False:
            return "off"
        if value is True:
            return "auto"
        return str(value).strip().lower()

    @field_validator("text_col", mode="before")
    @classmethod
    def _blank_text_col(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value)

    def to_dict(self, include_none: bool = False) -> dict:
        """Return this config as a plain dictionary."""
        return self.model_dump(exclude_none=not include_none)


class TrainConfig(BaseModel):
    """Schema for the MLP trainer."""
    arch: str = Field("128-64", description="Hidden layer sizes separated by '-'")
    drop: float = Field(0.2, ge=0.0, lt=1.0, description="Dropout rate (not supported by scikit-learn MLPs)")
    alpha: float = Field(1e-4, ge=0.0, description="L2 penalty")
    epochs: int = Field(20, gt=0, description="Number of passes over the training partition")
    batch: int = Field(64, gt=0, description="Mini-batch size")
    lr: float = Field(1e-3, gt=0.0, description="Adam learning rate")
    validation_split: float = Field(0.1, ge=0.0, lt=1.0, description="Share of training rows held out per epoch")
    seed: Optional[int] = Field(None, description="Seed for weight init and batch order")

    def to_dict(self, include_none: bool = False) -> dict:
        """Return this config as a plain dictionary."""
        return self.model_dump(exclude_none=not include_none)
