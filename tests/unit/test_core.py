"""Tests for core records, configuration and utilities."""

import logging
import math

import numpy as np
import pandas as pd
import pytest
import yaml
from pydantic import ValidationError

from tabtrain.core.exceptions import (
    InvalidColumnError,
    InvalidSchemaError,
    PipelineBusyError,
    TabTrainException,
)
from tabtrain.core.records import as_finite, as_string, is_finite_number, is_missing, to_records
from tabtrain.core.utils import (
    ConfigManager,
    LoggerFactory,
    PathManager,
    PrepareConfig,
    SeedManager,
    Timer,
    TrainConfig,
    clamp_split_pct,
    clamp_vocab_size,
)


class TestCellCoercion:
    """Explicit coercion of raw cells."""

    @pytest.mark.parametrize("value, expected", [
        (3, 3.0),
        (2.5, 2.5),
        (" 7.25 ", 7.25),
        (True, 1.0),
        ("abc", None),
        ("", None),
        (None, None),
        (float("nan"), None),
        (float("inf"), None),
        ("inf", None),
    ])
    def test_as_finite(self, value, expected):
        """Finite numbers and numeric strings coerce, everything else is None."""
        assert as_finite(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (5, "5"),
        (5.0, "5"),
        (2.5, "2.5"),
        ("red", "red"),
        (True, "true"),
        (False, "false"),
        (None, "null"),
        (float("nan"), "null"),
        (np.int64(4), "4"),
    ])
    def test_as_string(self, value, expected):
        """Stable string forms; integral floats match their integer."""
        assert as_string(value) == expected

    def test_is_finite_number_excludes_bools_and_strings(self):
        assert is_finite_number(1)
        assert is_finite_number(np.float32(0.5))
        assert not is_finite_number(True)
        assert not is_finite_number("1")
        assert not is_finite_number(math.inf)

    def test_is_missing(self):
        assert is_missing(None)
        assert is_missing(float("nan"))
        assert not is_missing(0)
        assert not is_missing("")


class TestToRecords:
    """Row normalisation."""

    def test_dataframe_nan_becomes_none(self):
        df = pd.DataFrame({"a": [1.0, np.nan], "b": ["x", None]})
        records = to_records(df)

        assert records == [{"a": 1.0, "b": "x"}, {"a": None, "b": None}]
        assert type(records[0]["a"]) is float

    def test_list_of_mappings(self):
        records = to_records([{"a": 1}, {"b": 2}])
        assert records == [{"a": 1}, {"b": 2}]

    @pytest.mark.parametrize("bad", [{"a": 1}, "rows", 42, [{"a": 1}, 3]])
    def test_rejects_non_row_input(self, bad):
        with pytest.raises(InvalidSchemaError):
            to_records(bad)


class TestClamping:
    """Caller-side validation of the preparation surface."""

    @pytest.mark.parametrize("value, expected", [
        (0.8, 0.8),
        (80, 0.8),
        (0.1, 0.5),
        (0.99, 0.95),
        (99, 0.95),
        (None, 0.8),
        ("bad", 0.8),
        (-1, 0.5),
        (-0.1, 0.5),
        (0, 0.8),
        (float("nan"), 0.8),
    ])
    def test_clamp_split_pct(self, value, expected):
        assert clamp_split_pct(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value, expected", [
        (500, 500),
        (10, 100),
        (100000, 5000),
        ("250", 250),
        (None, 500),
        (0, 500),
        (-5, 100),
        ("250.7", 250),
        (float("inf"), 500),
    ])
    def test_clamp_vocab_size(self, value, expected):
        assert clamp_vocab_size(value) == expected


class TestPrepareConfig:
    """Pydantic preparation config."""

    def test_defaults(self):
        cfg = PrepareConfig(target_col="y")

        assert cfg.task == "auto"
        assert cfg.split_pct == pytest.approx(0.8)
        assert cfg.class_weight_mode == "off"
        assert cfg.text_col is None
        assert cfg.vocab_size == 500
        assert cfg.fit_scope == "all"

    def test_normalisation(self):
        cfg = PrepareConfig(
            target_col="y", task="CLF", split_pct=90, vocab_size=20,
            class_weight_mode=True, text_col="  ",
        )

        assert cfg.task == "classification"
        assert cfg.split_pct == pytest.approx(0.9)
        assert cfg.vocab_size == 100
        assert cfg.class_weight_mode == "auto"
        assert cfg.text_col is None

    def test_unknown_task_rejected(self):
        with pytest.raises(ValidationError):
            PrepareConfig(target_col="y", task="ranking")

    def test_unknown_fit_scope_rejected(self):
        with pytest.raises(ValidationError):
            PrepareConfig(target_col="y", fit_scope="test")

    def test_to_dict(self):
        data = PrepareConfig(target_col="y", seed=3).to_dict()
        assert data["target_col"] == "y"
        assert data["seed"] == 3
        assert "text_col" not in data


class TestTrainConfig:

    def test_defaults(self):
        cfg = TrainConfig()
        assert cfg.arch == "128-64"
        assert cfg.epochs == 20
        assert cfg.batch == 64

    @pytest.mark.parametrize("field, value", [("drop", 1.0), ("epochs", 0), ("batch", -1), ("lr", 0)])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            TrainConfig(**{field: value})


class TestExceptions:
    """Error taxonomy."""

    def test_hierarchy(self):
        assert issubclass(InvalidSchemaError, TabTrainException)
        assert issubclass(InvalidSchemaError, ValueError)
        assert issubclass(InvalidColumnError, KeyError)
        assert issubclass(PipelineBusyError, RuntimeError)

    def test_invalid_column_message(self):
        err = InvalidColumnError("price")
        assert err.column == "price"
        assert str(err) == "Column 'price' not found in schema"


class TestSeedManager:
    """Test seed management functionality."""

    def test_set_seed(self):
        """Same seed, same numpy stream."""
        SeedManager.set_seed(42)
        expected = np.random.random(5)

        SeedManager.set_seed(42)
        actual = np.random.random(5)

        np.testing.assert_array_equal(actual, expected)
        assert SeedManager.get_seed() == 42


class TestPathManager:

    def test_paths(self, temp_dir):
        pm = PathManager(temp_dir)

        assert pm.project_root == temp_dir
        assert pm.config_dir == temp_dir / "configs"
        assert pm.artifacts_dir == temp_dir / "artifacts"

    def test_create_run_directory(self, temp_dir):
        run_dir = PathManager(temp_dir).create_run_directory("test_run")

        assert run_dir.exists()
        assert run_dir.name == "test_run"


class TestConfigManager:
    """Test configuration management."""

    def test_load_config(self, temp_dir):
        config = {"prepare": {"split_pct": 0.7}, "train": {"epochs": 3}}
        with open(temp_dir / "default.yaml", "w") as f:
            yaml.dump(config, f)

        cm = ConfigManager(temp_dir)

        assert cm.load_config("default") == config
        assert cm.load_config("default.yaml") == config

    def test_missing_config(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ConfigManager(temp_dir).load_config("absent")

    def test_config_hash(self, temp_dir):
        cm = ConfigManager(temp_dir)

        assert cm.get_config_hash({"a": 1, "b": 2}) == cm.get_config_hash({"b": 2, "a": 1})
        assert cm.get_config_hash({"a": 1}) != cm.get_config_hash({"a": 2})

    def test_shipped_defaults_are_valid(self):
        """configs/default.yaml builds both config models."""
        cm = ConfigManager(PathManager().config_dir)
        config = cm.load_config("default")

        PrepareConfig(target_col="y", **config["prepare"])
        TrainConfig(**config["train"])


class TestLogging:

    def test_logger_is_cached(self):
        assert LoggerFactory.get_logger("tabtrain.test") is LoggerFactory.get_logger("tabtrain.test")

    def test_timer_logs_completion(self, caplog):
        logger = LoggerFactory.get_logger("tabtrain.timer")
        logger.propagate = True
        with caplog.at_level(logging.INFO, logger="tabtrain.timer"):
            with Timer(logger, "step"):
                pass

        assert "Starting step" in caplog.text
        assert "Completed step" in caplog.text
