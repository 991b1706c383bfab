"""Feature encoding components: tabular one-hot/min-max and text bag-of-words."""
from tabtrain.features.base import BaseTransform
from tabtrain.features.encoding import OneHotStrategy, TabularEncoder, build_encoder
from tabtrain.features.scaling import MinMaxStrategy
from tabtrain.features.text import TextEncoder, Vocabulary, build_vocabulary, text_to_vector, tokenize

__all__ = [
    "BaseTransform",
    "TabularEncoder",
    "OneHotStrategy",
    "MinMaxStrategy",
    "build_encoder",
    "TextEncoder",
    "Vocabulary",
    "build_vocabulary",
    "text_to_vector",
    "tokenize",
]
