from typing import Any, Dict, Optional

from tabtrain.core.interfaces import IEncoderStrategy
from tabtrain.data.schema import ColumnKind
from tabtrain.features.encoding.strategies import MAX_CATEGORIES, OneHotStrategy
from tabtrain.features.scaling.scaler import EPSILON, MinMaxStrategy


def build_encoder(col: str, kind: ColumnKind, cfg: Optional[Dict[str, Any]] = None) -> Optional[IEncoderStrategy]:
    """Encoder for a tabular column of the given kind; ``None`` for text columns."""
    cfg = cfg or {}

    if kind == ColumnKind.CATEGORICAL:
        return OneHotStrategy(col, max_categories=cfg.get("max_categories", MAX_CATEGORIES))

    if kind == ColumnKind.NUMERIC:
        return MinMaxStrategy(col, epsilon=cfg.get("epsilon", EPSILON))

    if kind == ColumnKind.TEXT:
        # text goes through the bag-of-words encoder, not the tabular block
        return None

    raise ValueError(f"Unknown column kind '{kind}' for '{col}'")
