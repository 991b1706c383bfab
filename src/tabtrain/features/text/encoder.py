from __future__ import annotations
from typing import Any, List, Optional

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer

from tabtrain.core.records import Row, Rows, as_string, is_missing
from tabtrain.core.utils import DEFAULT_VOCAB_SIZE
from tabtrain.features.base import BaseTransform
from tabtrain.features.text.tokenizer import tokenize
from tabtrain.features.text.vocabulary import Vocabulary, build_vocabulary


def make_vectorizer(vocabulary: Vocabulary) -> Optional[CountVectorizer]:
    """Binary CountVectorizer pinned to ``vocabulary``; None for an empty vocabulary."""
    if vocabulary.size == 0:
        return None
    return CountVectorizer(
        vocabulary=dict(vocabulary.index),
        tokenizer=tokenize,
        token_pattern=None,
        lowercase=False,
        binary=True,
        dtype=np.float32,
    )


def vectorize(values: List[Any], vectorizer: Optional[CountVectorizer]) -> np.ndarray:
    if vectorizer is None:
        return np.zeros((len(values), 0), dtype=np.float32)
    documents = ["" if is_missing(v) else as_string(v) for v in values]
    return vectorizer.transform(documents).toarray()


def text_to_vector(row: Row, text_col: str, vocabulary: Vocabulary) -> np.ndarray:
    """Binary bag-of-words: 1 at the position of every in-vocabulary token of the row."""
    return vectorize([row.get(text_col)], make_vectorizer(vocabulary))[0]


class TextEncoder(BaseTransform):
    """
    Bag-of-words encoder for one text column.

    Pass a prebuilt ``vocabulary`` to share it across runs of the same
    preparation; otherwise ``fit`` builds one from the given rows.
    Out-of-vocabulary tokens are dropped.
    """

    def __init__(self, text_col: str, vocabulary: Optional[Vocabulary] = None,
                 vocab_size: int = DEFAULT_VOCAB_SIZE):
        super().__init__(name="TextEncoder")
        self.text_col = text_col
        self.vocabulary = vocabulary
        self.vocab_size = vocab_size
        self.vocabulary_: Vocabulary = Vocabulary.empty()
        self.vectorizer_: Optional[CountVectorizer] = None

    def fit(self, X: Rows, y: Optional[Any] = None) -> "TextEncoder":
        if self.vocabulary is not None:
            self.vocabulary_ = self.vocabulary
        else:
            self.vocabulary_ = build_vocabulary(self._as_records(X), self.text_col, self.vocab_size)
        self.vectorizer_ = make_vectorizer(self.vocabulary_)
        self.dim_ = self.vocabulary_.size
        self.is_fitted = True
        return self

    def transform_row(self, row: Row) -> np.ndarray:
        self._require_fitted()
        return vectorize([row.get(self.text_col)], self.vectorizer_)[0]

    def transform(self, X: Rows) -> np.ndarray:
        self._require_fitted()
        records = self._as_records(X)
        return vectorize([row.get(self.text_col) for row in records], self.vectorizer_)

    def get_feature_names(self) -> List[str]:
        return [f"{self.text_col}__{token}" for token in self.vocabulary_.tokens]
