from __future__ import annotations


class TabTrainException(Exception):
    """Base exception for tabtrain user-facing errors."""


class InvalidSchemaError(TabTrainException, ValueError):
    """Raised when the row set is empty or not a sequence of records."""


class InvalidColumnError(TabTrainException, KeyError):
    """Raised when a referenced column is absent from the inferred schema."""

    def __init__(self, column: str, message: str = ""):
        self.column = column
        super().__init__(message or f"Column '{column}' not found in schema")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0])


class CapacityExceededError(TabTrainException):
    """Describes the encoder capacity bounds.

    Categorical columns keep at most 200 categories and vocabularies at most
    the requested size. Both bounds truncate silently; this class is never
    raised by the pipeline and exists so callers can reference the bound in
    their own diagnostics.
    """


class PipelineBusyError(TabTrainException, RuntimeError):
    """Raised when a session step starts while another one is running."""


class PipelineStateError(TabTrainException, RuntimeError):
    """Raised when session steps are called out of order."""


class TrainingError(TabTrainException):
    """Raised for training/evaluation errors with actionable hints."""
