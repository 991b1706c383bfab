"""Text normalisation and tokenisation shared by vocabulary building and encoding."""

from __future__ import annotations

import re
from typing import Any, List

from tabtrain.core.records import as_string, is_missing

# Latin letters, Cyrillic (incl. ё), digits and whitespace survive; the rest becomes a space
_NON_TOKEN_CHARS = re.compile(r"[^a-zа-яё0-9\s]")
MIN_TOKEN_LENGTH = 2


def normalize(value: Any) -> str:
    text = "" if is_missing(value) else as_string(value)
    return _NON_TOKEN_CHARS.sub(" ", text.lower())


def tokenize(value: Any) -> List[str]:
    """Lower-cased word tokens of at least two characters."""
    return [t for t in normalize(value).split() if len(t) >= MIN_TOKEN_LENGTH]
