"""
Module: compose

Purpose:
    Compositors that turn decoded source pages into output documents.

Key Functions:
    - merge_sources(): Many sources into one document
    - split_source(): One source into one document per range

Key Classes:
    - SplitPreviewer: Incremental split range previews
"""

from .merge import compose_merge, merge_sources
from .split import compose_range, split_source
from .previewer import SplitPreviewer

__all__ = [
    "compose_merge",
    "merge_sources",
    "compose_range",
    "split_source",
    "SplitPreviewer",
]
