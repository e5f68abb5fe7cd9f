"""Command dispatch for eventfold."""

from .dispatcher import Dispatcher
from .preprocessors import (
    ContextPropagationPreprocessor,
    LoggingPreprocessor,
    Preprocessor,
    PreprocessorFunc,
    preprocessor,
)

__all__ = [
    "Dispatcher",
    "Preprocessor",
    "PreprocessorFunc",
    "preprocessor",
    "ContextPropagationPreprocessor",
    "LoggingPreprocessor",
]
