"""Command preprocessors run by the dispatcher before handling."""

from .base import Preprocessor, PreprocessorFunc, preprocessor
from .context import ContextPropagationPreprocessor
from .logging import LoggingPreprocessor

__all__ = [
    "Preprocessor",
    "PreprocessorFunc",
    "preprocessor",
    "ContextPropagationPreprocessor",
    "LoggingPreprocessor",
]
