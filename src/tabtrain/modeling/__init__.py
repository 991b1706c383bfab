"""MLP trainer collaborator and evaluation."""

from .evaluator import TrainingEvaluator
from .mlp import MLPTrainer, parse_architecture

__all__ = ["MLPTrainer", "TrainingEvaluator", "parse_architecture"]
