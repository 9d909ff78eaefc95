"""
Module: core.errors

Purpose:
    Exception hierarchy for the assembly engine and the mapping from each
    error kind to the message shown to a user.

Key Classes:
    - AssemblyError: Base class for all engine errors
    - UnsupportedFormatError: Input bytes are not a document container
    - CorruptInputError: Container signature present but unreadable
    - EmptyInputError: Merge requested with no sources
    - NotFoundError: Referenced id is not in the collection
    - CodecError: Decode/copy/serialize failed during a composition

Key Functions:
    - user_message(): Distinct user-facing text per error kind

Used By:
    - codec.fitz_codec: Raises format and codec errors
    - engine.sources / engine.ranges: Raise NotFoundError
    - compose: Raise EmptyInputError and CodecError
    - cli: Reports errors via user_message()
"""

from __future__ import annotations

from typing import Optional


class AssemblyError(Exception):
    """Base class for assembly engine errors."""
    pass


class UnsupportedFormatError(AssemblyError):
    """
    Input bytes are not a recognized document container.
    
    Attributes:
        name: Display name of the rejected input (if known)
    """
    
    def __init__(self, message: str, *, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name


class CorruptInputError(UnsupportedFormatError):
    """Input claims to be a document container but cannot be parsed."""
    pass


class EmptyInputError(AssemblyError):
    """Merge attempted with zero sources."""
    pass


class NotFoundError(AssemblyError, LookupError):
    """
    Operation referenced an id absent from the relevant collection.
    
    Attributes:
        key: The missing id
    """
    
    def __init__(self, message: str, *, key: object = None) -> None:
        super().__init__(message)
        self.key = key


class CodecError(AssemblyError):
    """
    Decode, copy or serialize failure during a composition.
    
    Aborts the single composition it occurred in: the whole merge, or one
    split range.
    
    Attributes:
        source_id: Id of the source that failed (merge)
        range_id: Id of the range that failed (split)
        name: Display name of the failing source or range
    """
    
    def __init__(
        self,
        message: str,
        *,
        source_id: Optional[str] = None,
        range_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.source_id = source_id
        self.range_id = range_id
        self.name = name


def user_message(exc: BaseException) -> str:
    """
    Map an engine error to the message shown to a user.
    
    Every error kind maps to a distinct, non-empty message. Unknown
    exceptions get a generic message so nothing is ever shown blank.
    
    Args:
        exc: Exception raised by an engine operation
        
    Returns:
        Human-readable message
        
    Example:
        >>> user_message(EmptyInputError("no sources"))
        'Please add at least one PDF file before merging.'
    """
    if isinstance(exc, CorruptInputError):
        label = f" '{exc.name}'" if exc.name else ""
        return f"The file{label} looks like a PDF but could not be read. It may be damaged."
    if isinstance(exc, UnsupportedFormatError):
        label = f" '{exc.name}'" if exc.name else ""
        return f"The file{label} is not a valid PDF file."
    if isinstance(exc, EmptyInputError):
        return "Please add at least one PDF file before merging."
    if isinstance(exc, NotFoundError):
        return "The selected item no longer exists. Please refresh and try again."
    if isinstance(exc, CodecError):
        if exc.range_id is not None:
            return f"Could not create the part '{exc.name or exc.range_id}'. Please try again."
        if exc.name:
            return f"Could not process '{exc.name}'. The whole operation was cancelled."
        return "Error processing PDF files. Please try again."
    return f"Unexpected error: {exc}"
