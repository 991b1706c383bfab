"""Text tokenisation, vocabulary and bag-of-words encoding."""

from .encoder import TextEncoder, text_to_vector
from .tokenizer import tokenize
from .vocabulary import Vocabulary, build_vocabulary

__all__ = [
    "tokenize",
    "Vocabulary",
    "build_vocabulary",
    "TextEncoder",
    "text_to_vector",
]
