from .scaler import EPSILON, MinMaxStrategy

__all__ = ["EPSILON", "MinMaxStrategy"]
