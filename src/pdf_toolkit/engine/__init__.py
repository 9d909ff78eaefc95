"""
Module: engine

Purpose:
    Mutable session state for merging and splitting: preview lifecycle,
    the ordered source collection, the split range set, and the session
    context that owns them.

Key Classes:
    - PreviewRegistry: Revocable preview handles
    - SourceCollection: Ordered merge sources
    - RangeSet: Named page ranges for a split
    - AssemblySession: Session context

Used By:
    - cli: Command line host
"""

from .previews import PreviewHandle, PreviewRegistry, range_key, source_key
from .sources import AddResult, SourceCollection
from .ranges import RangeSet, resolve_bound
from .session import AssemblySession

__all__ = [
    "PreviewHandle",
    "PreviewRegistry",
    "range_key",
    "source_key",
    "AddResult",
    "SourceCollection",
    "RangeSet",
    "resolve_bound",
    "AssemblySession",
]
