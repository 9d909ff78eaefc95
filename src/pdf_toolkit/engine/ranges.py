"""
Module: engine.ranges

Purpose:
    Named page ranges over a single split source. Edits are permissive:
    bounds are typed as draft text and resolved to integers on commit,
    and out-of-bounds or reversed ranges are kept. Only composition
    decides whether a range is eligible.

Key Classes:
    - RangeSet: Ordered SplitRanges bound to one page count

Key Functions:
    - resolve_bound(): Draft text to committed integer

Dependencies:
    - core.models: SplitRange
    - engine.previews: Releases range previews on removal

Used By:
    - engine.session: Split screen state
    - compose.split / compose.previewer: Iterated in order
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Dict, Iterator, List, Optional

from pdf_toolkit.core.errors import NotFoundError
from pdf_toolkit.core.models import SplitRange

from .previews import PreviewRegistry, range_key

logger = logging.getLogger(__name__)

RANGE_FIELDS = ("name", "start", "end")
BOUND_FIELDS = ("start", "end")

_LEADING_INT = re.compile(r"^[+-]?\d+")


def resolve_bound(raw: object, default: int) -> int:
    """
    Resolve draft bound text to a committed integer.

    Leading integer digits are used ("12abc" -> 12). Empty, unparsable
    and zero input resolve to `default`; negative values clamp to 1.
    Values above the page count are kept as typed.

    Example:
        >>> resolve_bound("", 10)
        10
        >>> resolve_bound("-3", 10)
        1
        >>> resolve_bound("42", 10)
        42
    """
    text = "" if raw is None else str(raw).strip()
    match = _LEADING_INT.match(text)
    if not match:
        return default
    value = int(match.group())
    if value == 0:
        return default
    return max(1, value)


class RangeSet:
    """
    Ordered split ranges over a source with `total_pages` pages.

    The page count is fixed for the lifetime of the set; a new source
    needs a new RangeSet. Range ids and auto-generated names come from a
    running counter that is never reused after removal.

    Attributes:
        total_pages: Page count of the bound source (immutable)

    Example:
        >>> ranges = RangeSet(10)
        >>> [r.name for r in ranges]
        ['Part 1']
        >>> second = ranges.add()
        >>> ranges.set_bounds(second.id, 3, 5)
        SplitRange(id=2, start=3, end=5, name='Part 2')
    """

    def __init__(
        self,
        total_pages: int,
        previews: Optional[PreviewRegistry] = None,
        *,
        name_prefix: str = "Part",
    ) -> None:
        if total_pages < 1:
            raise ValueError(f"total_pages must be >= 1: {total_pages}")
        self._total_pages = total_pages
        self._previews = previews
        self._name_prefix = name_prefix
        self._ranges: List[SplitRange] = []
        self._drafts: Dict[int, Dict[str, str]] = {}
        self._added = 0
        self.initialize()

    @property
    def total_pages(self) -> int:
        """Page count of the bound source."""
        return self._total_pages

    # ─────────────────────────────────────────────────────────────────────────
    # Mutators
    # ─────────────────────────────────────────────────────────────────────────

    def initialize(self) -> SplitRange:
        """
        Reset to a single full-span range named "<prefix> 1".

        Existing ranges are dropped and their previews released.
        """
        for split_range in self._ranges:
            self._release(split_range.id)
        self._ranges.clear()
        self._drafts.clear()
        self._added = 0
        return self.add()

    def add(self) -> SplitRange:
        """Append a full-span range with the next auto-generated name."""
        self._added += 1
        split_range = SplitRange(
            id=self._added,
            start=1,
            end=self._total_pages,
            name=f"{self._name_prefix} {self._added}",
        )
        self._ranges.append(split_range)
        self._drafts[split_range.id] = {"start": "1", "end": str(self._total_pages)}
        logger.debug(f"Added range {split_range.id} ({split_range.name})")
        return split_range

    def remove(self, range_id: int) -> bool:
        """
        Delete a range and release its preview.

        No-op if absent. Removing the last range leaves an empty set.

        Returns:
            True if a range was removed
        """
        index = self._find(range_id)
        if index is None:
            return False
        removed = self._ranges.pop(index)
        self._drafts.pop(range_id, None)
        self._release(range_id)
        logger.debug(f"Removed range {range_id} ({removed.name})")
        return True

    def update(self, range_id: int, field: str, value: object) -> SplitRange:
        """
        Edit one field of a range.

        `name` is stored verbatim immediately. `start`/`end` are stored as
        draft text and only take effect on commit().

        Raises:
            NotFoundError: If the range is absent
            ValueError: If `field` is not name/start/end
        """
        if field not in RANGE_FIELDS:
            raise ValueError(f"Unknown range field: {field!r}")
        index = self._require(range_id)

        if field == "name":
            updated = replace(self._ranges[index], name="" if value is None else str(value))
            self._ranges[index] = updated
            return updated

        self._drafts[range_id][field] = "" if value is None else str(value)
        return self._ranges[index]

    def commit(self, range_id: int, field: Optional[str] = None) -> SplitRange:
        """
        Finalize draft bounds into the committed range.

        Empty or unparsable input resolves to 1 for `start` and to the
        page count for `end`. The draft text is rewritten to the
        resolved value.

        Args:
            range_id: Range to commit
            field: "start", "end", or None for both

        Raises:
            NotFoundError: If the range is absent
            ValueError: If `field` is not start/end
        """
        if field is not None and field not in BOUND_FIELDS:
            raise ValueError(f"Only start/end can be committed: {field!r}")
        index = self._require(range_id)
        fields = (field,) if field else BOUND_FIELDS

        drafts = self._drafts[range_id]
        values = {}
        for name in fields:
            default = 1 if name == "start" else self._total_pages
            values[name] = resolve_bound(drafts.get(name), default)
            drafts[name] = str(values[name])

        updated = replace(self._ranges[index], **values)
        self._ranges[index] = updated
        if not updated.is_eligible(self._total_pages):
            logger.debug(f"Range {range_id} committed as {updated.start}-{updated.end} (not eligible)")
        return updated

    def set_bounds(self, range_id: int, start: object, end: object) -> SplitRange:
        """Draft and commit both bounds in one call."""
        self.update(range_id, "start", start)
        self.update(range_id, "end", end)
        return self.commit(range_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def get(self, range_id: int) -> SplitRange:
        """Return a range by id (NotFoundError if absent)."""
        return self._ranges[self._require(range_id)]

    def input_value(self, range_id: int, field: str) -> str:
        """Current draft text for a bound, as shown in an edit field."""
        if field not in BOUND_FIELDS:
            raise ValueError(f"Only start/end have draft input: {field!r}")
        self._require(range_id)
        return self._drafts[range_id][field]

    def eligible(self) -> List[SplitRange]:
        """Ranges that can be composed, in order."""
        return [r for r in self._ranges if r.is_eligible(self._total_pages)]

    @property
    def ids(self) -> List[int]:
        """Range ids in order."""
        return [r.id for r in self._ranges]

    def __iter__(self) -> Iterator[SplitRange]:
        return iter(list(self._ranges))

    def __len__(self) -> int:
        return len(self._ranges)

    def _find(self, range_id: int) -> Optional[int]:
        for i, split_range in enumerate(self._ranges):
            if split_range.id == range_id:
                return i
        return None

    def _require(self, range_id: int) -> int:
        index = self._find(range_id)
        if index is None:
            raise NotFoundError(f"Range not found: {range_id}", key=range_id)
        return index

    def _release(self, range_id: int) -> None:
        if self._previews is not None:
            self._previews.release(range_key(range_id))
