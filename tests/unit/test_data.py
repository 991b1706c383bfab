"""Tests for schema inference, CSV loading and dataset validation."""

import numpy as np
import pytest

from tabtrain.core.exceptions import InvalidColumnError, InvalidSchemaError
from tabtrain.data.loader import CsvDataLoader, is_remote
from tabtrain.data.schema import ColumnKind, SchemaInferrer, guess_target_column, infer_schema
from tabtrain.data.validate import DatasetValidator
from tabtrain.dataset.preparer import PreparedDataset


class TestSchemaInference:
    """Column kind rules and their precedence."""

    def test_kinds(self, wine_rows):
        schema = infer_schema(wine_rows)

        assert schema.kind_of("price") == ColumnKind.NUMERIC
        assert schema.kind_of("color") == ColumnKind.CATEGORICAL
        assert schema.kind_of("review") == ColumnKind.TEXT
        assert schema.kind_of("quality") == ColumnKind.CATEGORICAL
        assert schema.names == ["price", "color", "region", "review", "quality"]

    def test_unique_count_ignores_missing(self):
        rows = [{"c": "a"}, {"c": None}, {"c": "b"}, {"c": "a"}, {"c": float("nan")}]
        schema = infer_schema(rows)

        assert schema["c"].unique_count == 2

    def test_numeric_share_must_exceed_threshold(self):
        """Seven numbers out of ten is not more than 70%."""
        rows = [{"v": i} for i in range(7)] + [{"v": "x"}, {"v": "y"}, {"v": "z"}]
        assert infer_schema(rows).kind_of("v") == ColumnKind.CATEGORICAL

        rows = [{"v": i} for i in range(8)] + [{"v": "x"}, {"v": "y"}]
        assert infer_schema(rows).kind_of("v") == ColumnKind.NUMERIC

    def test_text_takes_precedence(self):
        long = "a sentence that is clearly longer than twenty characters"
        rows = [{"t": long}, {"t": 1}, {"t": 2}]
        assert infer_schema(rows).kind_of("t") == ColumnKind.TEXT

    def test_numeric_strings_are_not_numeric(self):
        """Only real numbers count; CSV loading types numeric columns already."""
        rows = [{"v": "1"}, {"v": "2"}, {"v": "3"}]
        assert infer_schema(rows).kind_of("v") == ColumnKind.CATEGORICAL

    def test_sample_is_bounded(self):
        rows = [{"v": i} for i in range(10)] + [{"v": "late", "extra": "x"}]
        schema = SchemaInferrer(sample_rows=10).infer(rows)

        assert schema.sample_size == 10
        assert "extra" not in schema
        assert schema["v"].unique_count == 10

    def test_column_missing_from_most_rows(self):
        rows = [{"a": 1}, {"a": 2, "b": "x"}, {"a": 3}]
        schema = infer_schema(rows)

        assert schema.kind_of("b") == ColumnKind.CATEGORICAL
        assert schema["b"].unique_count == 1

    def test_accepts_dataframe(self, wine_frame):
        schema = infer_schema(wine_frame)
        assert len(schema) == 5

    def test_empty_rows(self):
        with pytest.raises(InvalidSchemaError):
            infer_schema([])

    def test_rows_without_columns(self):
        with pytest.raises(InvalidSchemaError):
            infer_schema([{}, {}])

    def test_unknown_column_lookup(self, color_score_rows):
        schema = infer_schema(color_score_rows)
        with pytest.raises(InvalidColumnError):
            schema["missing"]
        assert schema.get("missing") is None

    def test_kind_counts_and_dict(self, color_score_rows):
        schema = infer_schema(color_score_rows)

        assert schema.kind_counts() == {"numeric": 1, "categorical": 1, "text": 0}
        assert schema.to_dict()["color"] == {"kind": "categorical", "unique": 2}
        assert schema.columns_of(ColumnKind.NUMERIC) == ["score"]


class TestGuessTargetColumn:

    def test_prefers_label_like_names(self):
        assert guess_target_column(["id", "wine", "Pairing_Score"]) == "Pairing_Score"
        assert guess_target_column(["a", "rating"]) == "rating"

    def test_falls_back_to_first(self):
        assert guess_target_column(["a", "b"]) == "a"
        assert guess_target_column([]) is None


class TestCsvDataLoader:
    """CSV file loading."""

    def test_load(self, wine_csv):
        rows = CsvDataLoader(wine_csv).load()

        assert len(rows) == 40
        assert isinstance(rows[0]["price"], float)
        assert rows[0]["color"] == "red"

    def test_empty_cells_become_none(self, temp_dir):
        path = temp_dir / "gaps.csv"
        path.write_text("a,b\n1,x\n,y\n\n3,\n")

        rows = CsvDataLoader(path).load()

        assert len(rows) == 3
        assert rows[1]["a"] is None
        assert rows[2]["b"] is None

    def test_mostly_numeric_column_keeps_its_numbers(self, temp_dir):
        path = temp_dir / "prices.csv"
        lines = ["price,color"] + [f"{i},red" for i in range(9)] + ["unknown,blue"]
        path.write_text("\n".join(lines) + "\n")

        rows = CsvDataLoader(path).load()

        assert rows[3]["price"] == 3.0
        assert rows[9]["price"] == "unknown"
        assert infer_schema(rows).kind_of("price") == ColumnKind.NUMERIC

    def test_na_tokens_stay_text(self, temp_dir):
        path = temp_dir / "regions.csv"
        path.write_text("region,y\nNA,1\nEU,2\nNA,3\nnull,4\n")

        rows = CsvDataLoader(path).load()

        assert rows[0]["region"] == "NA"
        assert rows[3]["region"] == "null"
        assert infer_schema(rows)["region"].unique_count == 3

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            CsvDataLoader(temp_dir / "absent.csv").load()

    def test_header_only(self, temp_dir):
        path = temp_dir / "header.csv"
        path.write_text("a,b\n")

        with pytest.raises(InvalidSchemaError):
            CsvDataLoader(path).load()

    def test_remote_sources_are_not_paths(self):
        assert is_remote("https://example.com/data.csv")
        assert not is_remote("data/local.csv")
        assert CsvDataLoader("https://example.com/data.csv").source == "https://example.com/data.csv"


def _dataset(**overrides):
    base = dict(
        X_train=np.zeros((3, 2), dtype=np.float32),
        Y_train=np.array([[1, 0], [0, 1], [1, 0]], dtype=np.float32),
        X_test=np.zeros((1, 2), dtype=np.float32),
        Y_test=np.array([[0, 1]], dtype=np.float32),
        is_classification=True,
        n_classes=2,
        label_map={"a": 0, "b": 1},
        input_dim=2,
    )
    base.update(overrides)
    return PreparedDataset(**base)


class TestDatasetValidator:
    """Shape contract checks."""

    def test_valid(self):
        assert DatasetValidator().validate(_dataset())

    def test_wrong_input_dim(self):
        with pytest.raises(ValueError, match="expected 3"):
            DatasetValidator().validate(_dataset(input_dim=3))

    def test_row_mismatch(self):
        with pytest.raises(ValueError, match="label rows"):
            DatasetValidator().validate(_dataset(Y_train=np.array([[1, 0]], dtype=np.float32)))

    def test_label_row_without_a_one(self):
        Y = np.array([[1, 0], [0, 0], [1, 0]], dtype=np.float32)
        with pytest.raises(ValueError, match="exactly one 1"):
            DatasetValidator().validate(_dataset(Y_train=Y))

    def test_label_map_not_bijective(self):
        with pytest.raises(ValueError, match="bijection"):
            DatasetValidator().validate(_dataset(label_map={"a": 0, "b": 0}))

    def test_class_weight_length(self):
        with pytest.raises(ValueError, match="class_weights"):
            DatasetValidator().validate(_dataset(class_weights=[1.0]))

    def test_regression_single_column(self):
        dataset = _dataset(
            Y_train=np.zeros((3, 1), dtype=np.float32),
            Y_test=np.zeros((1, 1), dtype=np.float32),
            is_classification=False, n_classes=0, label_map=None,
        )
        assert DatasetValidator().validate(dataset)
