"""
Core Package

Error taxonomy, data models and naming helpers shared by the codec,
engine and compositor layers. Models are plain dataclasses; anything that
is handed across the engine boundary is frozen.
"""

from .errors import (
    AssemblyError,
    CodecError,
    CorruptInputError,
    EmptyInputError,
    NotFoundError,
    UnsupportedFormatError,
    user_message,
)
from .models import CompositionResult, SourceDocument, SplitRange, SplitReport
from .naming import ensure_extension, format_file_size

__all__ = [
    "AssemblyError",
    "CodecError",
    "CorruptInputError",
    "EmptyInputError",
    "NotFoundError",
    "UnsupportedFormatError",
    "user_message",
    "CompositionResult",
    "SourceDocument",
    "SplitRange",
    "SplitReport",
    "ensure_extension",
    "format_file_size",
]
