"""
Shared fixtures: small row sets covering every column kind, and CSV files on disk.
"""

import tempfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest


REVIEWS = [
    "crisp white wine with a fresh citrus finish",
    "heavy red wine, great pairing with steak",
    "light and fruity rose for summer evenings",
    "bold red with dark fruit and firm tannins",
    "sparkling wine, lively bubbles and green apple",
    "sweet dessert wine pairing nicely with cheese",
]


@pytest.fixture
def temp_dir():
    """Temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def color_score_rows():
    """Regression rows with one categorical feature."""
    return [
        {"color": "red", "score": 5},
        {"color": "blue", "score": 3},
        {"color": "red", "score": 9},
    ]


@pytest.fixture
def label_rows():
    """Classification rows with a categorical target."""
    return [
        {"size": 1.0, "label": "cat"},
        {"size": 4.0, "label": "dog"},
        {"size": 2.0, "label": "cat"},
    ]


@pytest.fixture
def text_rows():
    return [
        {"review": "good wine pairing", "label": "a"},
        {"review": "bad pairing choice", "label": "b"},
    ]


@pytest.fixture
def wine_rows():
    """Forty rows with numeric, categorical, text and label columns."""
    rng = np.random.default_rng(7)
    rows = []
    for i in range(40):
        color = ["red", "white", "rose"][i % 3]
        rows.append({
            "price": float(rng.integers(5, 60)),
            "color": color,
            "region": ["north", "south"][i % 2],
            "review": REVIEWS[i % len(REVIEWS)],
            "quality": "good" if i % 4 else "poor",
        })
    return rows


@pytest.fixture
def wine_frame(wine_rows):
    return pd.DataFrame(wine_rows)


@pytest.fixture
def wine_csv(temp_dir, wine_frame):
    """The wine rows written as a CSV file."""
    path = temp_dir / "wine.csv"
    wine_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def regression_csv(temp_dir):
    """Numeric target: ``score`` is roughly linear in ``x``."""
    rng = np.random.default_rng(3)
    x = rng.uniform(0, 10, size=60)
    df = pd.DataFrame({
        "x": x,
        "group": np.where(x > 5, "high", "low"),
        "score": 2.0 * x + rng.normal(0, 0.1, size=60),
    })
    path = temp_dir / "scores.csv"
    df.to_csv(path, index=False)
    return path
