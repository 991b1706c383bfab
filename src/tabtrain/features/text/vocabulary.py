"""Fixed-size token vocabulary for a text column."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, List, Mapping, Tuple

from tabtrain.core.records import Rows
from tabtrain.core.utils import DEFAULT_VOCAB_SIZE, LoggerFactory, clamp_vocab_size
from tabtrain.features.text.tokenizer import tokenize

logger = LoggerFactory.get_logger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Top-K tokens by frequency and their positions.

    Immutable: one instance is built per preparation run and shared by every
    transform so train and test rows use the same index.
    """

    tokens: Tuple[str, ...] = ()
    index: Mapping[str, int] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "index", MappingProxyType({t: i for i, t in enumerate(self.tokens)}))

    @property
    def size(self) -> int:
        return len(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __contains__(self, token: object) -> bool:
        return token in self.index

    @classmethod
    def empty(cls) -> "Vocabulary":
        return cls(())


def count_tokens(values: Iterable[Any], tokenizer: Callable[[Any], List[str]] = tokenize) -> Counter:
    """Token frequencies; Counter keeps first-encountered order for equal counts."""
    freq: Counter = Counter()
    for value in values:
        freq.update(tokenizer(value))
    return freq


def build_vocabulary(
    rows: Rows,
    text_col: str,
    vocab_size: int = DEFAULT_VOCAB_SIZE,
    tokenizer: Callable[[Any], List[str]] = tokenize,
) -> Vocabulary:
    """Keep the ``vocab_size`` most frequent tokens of ``text_col``.

    ``vocab_size`` is clamped to [100, 5000]. Ties keep first-encountered
    order. A column absent from every row gives an empty vocabulary.
    """
    size = clamp_vocab_size(vocab_size)
    if not any(text_col in row for row in rows):
        logger.warning(f"Text column '{text_col}' not present in rows; vocabulary is empty")
        return Vocabulary.empty()

    freq = count_tokens((row.get(text_col) for row in rows), tokenizer)
    # sorted() is stable, so equal counts stay in first-encountered order
    ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
    vocab = Vocabulary(tuple(token for token, _ in ranked[:size]))

    if len(freq) > size:
        logger.debug(f"Vocabulary for '{text_col}' truncated: {len(freq)} distinct tokens, kept {size}")
    logger.info(f"Vocabulary for '{text_col}': {vocab.size} tokens (requested {size})")
    return vocab
