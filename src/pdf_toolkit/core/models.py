"""
Module: core.models

Purpose:
    Data models for the assembly engine: imported sources, split ranges
    and the outputs of a composition.

Key Classes:
    - SourceDocument: Imported document with lazily resolved page count
    - SplitRange: Named, 1-based inclusive page interval (immutable)
    - CompositionResult: Output name and bytes of one composition
    - SplitReport: Results, skipped ranges and failures of a split

Dependencies:
    - dataclasses (std)
    - core.errors: CodecError (SplitReport failures)

Used By:
    - engine.sources: Creates SourceDocuments
    - engine.ranges: Creates and replaces SplitRanges
    - compose: Produces CompositionResults and SplitReports
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Tuple

from .errors import CodecError
from .naming import format_file_size


@dataclass(eq=False)
class SourceDocument:
    """
    An imported document contributing pages to a merge or split.

    The raw bytes are owned by the collection entry. The page count is
    resolved through the codec on first access and cached.

    Attributes:
        id: Opaque id, stable across reorders
        name: Display name (usually the file name)
        data: Raw document bytes
        page_counter: Callable returning the page count for `data`

    Example:
        >>> doc = SourceDocument("a1b2c3", "report.pdf", pdf_bytes, codec.count_pages)
        >>> doc.page_count
        12
    """

    id: str
    name: str
    data: bytes = field(repr=False)
    page_counter: Optional[Callable[[bytes], int]] = field(default=None, repr=False)
    _page_count: Optional[int] = field(default=None, init=False, repr=False)

    @property
    def size(self) -> int:
        """Byte length of the raw document."""
        return len(self.data)

    @property
    def display_size(self) -> str:
        """Human-readable byte length, e.g. "1.5 MB"."""
        return format_file_size(self.size)

    @property
    def page_count(self) -> int:
        """
        Number of pages, decoded once and cached.

        Raises:
            RuntimeError: If no page counter was supplied
            UnsupportedFormatError: If the codec cannot decode the bytes
        """
        if self._page_count is None:
            if self.page_counter is None:
                raise RuntimeError(f"No page counter available for source {self.id}")
            self._page_count = self.page_counter(self.data)
        return self._page_count

    @property
    def page_count_resolved(self) -> bool:
        """Whether the page count has already been decoded."""
        return self._page_count is not None


@dataclass(frozen=True)
class SplitRange:
    """
    Named page interval over the bound split source (immutable).

    Bounds are 1-based and inclusive. Committed values may be out of
    bounds or reversed; eligibility is decided at composition time.

    Attributes:
        id: Stable id, assigned monotonically by the RangeSet
        start: First page (1-based, inclusive)
        end: Last page (1-based, inclusive)
        name: Output name (display only, not validated)

    Example:
        >>> r = SplitRange(id=1, start=3, end=5, name="Part 1")
        >>> r.page_indices()
        [2, 3, 4]
    """

    id: int
    start: int
    end: int
    name: str

    def is_eligible(self, total_pages: int) -> bool:
        """
        Check whether this range can be composed from a source.

        Args:
            total_pages: Page count of the bound source

        Returns:
            True if 1 <= start <= end <= total_pages
        """
        return 1 <= self.start <= self.end and self.start <= total_pages and self.end <= total_pages

    def page_indices(self) -> list[int]:
        """0-based page indices covered by this range, in order."""
        return list(range(self.start - 1, self.end))

    @property
    def page_count(self) -> int:
        """Number of pages covered (0 when reversed)."""
        return max(0, self.end - self.start + 1)


@dataclass(frozen=True)
class CompositionResult:
    """
    One output document produced by a merge or a split range.

    Not retained by the engine; handed to the caller as-is.

    Attributes:
        name: Output file name including extension
        data: Serialized document bytes
        page_count: Pages in the output
        source_ids: Ids of the sources that contributed pages
        range_id: Id of the split range (None for merges)
    """

    name: str
    data: bytes = field(repr=False)
    page_count: int
    source_ids: Tuple[str, ...] = ()
    range_id: Optional[int] = None

    @property
    def size(self) -> int:
        """Byte length of the output."""
        return len(self.data)


@dataclass(frozen=True)
class SplitReport:
    """
    Outcome of splitting one source by a RangeSet.

    Attributes:
        results: One CompositionResult per composed range, in RangeSet order
        skipped: Ids of ineligible ranges (no output, no error)
        failures: Per-range CodecErrors; sibling ranges are unaffected

    Example:
        >>> report = await split_source(source, ranges, codec)
        >>> [r.name for r in report]
        ['Part 1.pdf', 'Part 2.pdf']
    """

    results: Tuple[CompositionResult, ...] = ()
    skipped: Tuple[int, ...] = ()
    failures: Tuple[CodecError, ...] = ()

    def __iter__(self) -> Iterator[CompositionResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        """True when no range failed (skips are not failures)."""
        return not self.failures
