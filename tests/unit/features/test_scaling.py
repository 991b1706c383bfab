"""Tests for min-max scaling of numeric columns."""

import numpy as np
import pytest

from tabtrain.features.scaling import MinMaxStrategy
from tabtrain.features.scaling.scaler import EPSILON


class TestMinMaxStrategy:

    def test_fit_range(self):
        enc = MinMaxStrategy("price").fit([10, 5, None, "n/a", 20])

        assert enc.min_ == 5.0
        assert enc.max_ == 20.0
        assert enc.n_fitted_ == 3

    def test_values_in_range_land_in_unit_interval(self):
        values = [3.0, 7.5, -2.0, 11.0]
        enc = MinMaxStrategy("x").fit(values)
        scaled = np.array([enc.scale(v) for v in values])

        assert scaled.min() >= 0.0
        assert scaled.max() <= 1.0 + 1e-6
        assert enc.scale(-2.0) == 0.0
        assert enc.scale(11.0) == pytest.approx(1.0)

    def test_constant_column_does_not_divide_by_zero(self):
        enc = MinMaxStrategy("x").fit([4, 4, 4])

        assert enc.scale(4) == 0.0
        assert enc.scale(5) == pytest.approx(1.0 / EPSILON)

    def test_non_finite_values_encode_as_zero(self):
        enc = MinMaxStrategy("x").fit([1, 3])

        assert enc.scale(None) == 0.0
        assert enc.scale(float("nan")) == 0.0
        assert enc.scale("abc") == 0.0

    def test_fallback_range_without_finite_values(self):
        enc = MinMaxStrategy("x").fit([None, "abc"])
        info = enc.get_scaling_info()

        assert (enc.min_, enc.max_) == (0.0, 1.0)
        assert info["fallback"] is True
        assert enc.scale(0.5) == pytest.approx(0.5)

    def test_encode_block(self):
        enc = MinMaxStrategy("x").fit([0, 10])
        block = enc.encode(5)

        assert block.dtype == np.float32
        assert block.shape == (1,)
        assert enc.output_columns() == ["x"]

    def test_transform_column(self):
        enc = MinMaxStrategy("x").fit([0, 10])
        X = enc.transform([0, 5, None])

        assert X.shape == (3, 1)
        np.testing.assert_allclose(X[:, 0], [0.0, 0.5, 0.0], atol=1e-6)
