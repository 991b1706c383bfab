from .factory import build_encoder
from .strategies import MAX_CATEGORIES, OneHotStrategy
from .tabular import TabularEncoder

__all__ = ["build_encoder", "MAX_CATEGORIES", "OneHotStrategy", "TabularEncoder"]
