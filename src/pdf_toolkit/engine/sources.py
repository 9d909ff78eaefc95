"""
Module: engine.sources

Purpose:
    Ordered collection of imported source documents for a merge.
    Insertion order is merge order; entries can be removed and moved.

Key Classes:
    - SourceCollection: Ordered, id-addressed source list
    - AddResult: Added sources and per-input rejections

Dependencies:
    - codec.base: DocumentCodec (format check, page counts)
    - engine.previews: PreviewRegistry (source previews)

Used By:
    - engine.session: Merge screen state
    - compose.merge: Iterated in order by merge_sources()
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Iterable, Iterator, List, Optional, Tuple

from pdf_toolkit.codec.base import DocumentCodec
from pdf_toolkit.core.errors import NotFoundError, UnsupportedFormatError
from pdf_toolkit.core.models import SourceDocument

from .previews import PreviewRegistry, source_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddResult:
    """
    Outcome of SourceCollection.add().

    Attributes:
        added: New sources, in input order
        rejected: UnsupportedFormatError per rejected input, in input order
    """

    added: Tuple[SourceDocument, ...] = ()
    rejected: Tuple[UnsupportedFormatError, ...] = ()


class SourceCollection:
    """
    Ordered set of source documents.

    Ids are unique within the collection and stable across reorders.
    Every entry holds a live preview under source_key(id) until it is
    removed.

    Example:
        >>> sources = SourceCollection(codec, registry)
        >>> result = sources.add([("a.pdf", a_bytes), ("b.pdf", b_bytes)])
        >>> sources.reorder(result.added[1].id, 0)
        >>> [s.name for s in sources]
        ['b.pdf', 'a.pdf']
    """

    def __init__(self, codec: DocumentCodec, previews: PreviewRegistry) -> None:
        self._codec = codec
        self._previews = previews
        self._items: List[SourceDocument] = []

    # ─────────────────────────────────────────────────────────────────────────
    # Mutators
    # ─────────────────────────────────────────────────────────────────────────

    def add(self, inputs: Iterable[Tuple[str, bytes]]) -> AddResult:
        """
        Append sources in input order.

        Inputs that fail the codec's format check are rejected
        individually; the rest are still added.

        Args:
            inputs: (display name, raw bytes) pairs

        Returns:
            AddResult with the added sources and the rejections
        """
        added: List[SourceDocument] = []
        rejected: List[UnsupportedFormatError] = []

        for name, data in inputs:
            if not self._codec.sniff(data):
                logger.warning(f"Rejected {name!r}: not a supported document")
                rejected.append(UnsupportedFormatError(f"{name} is not a supported document", name=name))
                continue

            source = SourceDocument(
                id=self._new_id(),
                name=name,
                data=data,
                page_counter=partial(self._codec.count_pages, name=name),
            )
            self._items.append(source)
            self._previews.acquire(source_key(source.id), data)
            added.append(source)
            logger.debug(f"Added source {source.id} ({name}, {source.display_size})")

        return AddResult(tuple(added), tuple(rejected))

    def remove(self, source_id: str) -> bool:
        """
        Remove a source and release its preview.

        No-op if the id is absent. Relative order of the remaining
        entries is unchanged.

        Returns:
            True if an entry was removed
        """
        index = self._find(source_id)
        if index is None:
            return False
        source = self._items.pop(index)
        self._previews.release(source_key(source.id))
        logger.debug(f"Removed source {source.id} ({source.name})")
        return True

    def reorder(self, source_id: str, new_index: int) -> None:
        """
        Move a source to `new_index`, clamped to [0, len - 1].

        Raises:
            NotFoundError: If the id is absent
        """
        index = self._find(source_id)
        if index is None:
            raise NotFoundError(f"Source not found: {source_id}", key=source_id)
        target = max(0, min(new_index, len(self._items) - 1))
        if target == index:
            return
        source = self._items.pop(index)
        self._items.insert(target, source)
        logger.debug(f"Moved source {source_id} from {index} to {target}")

    def clear(self) -> None:
        """Remove all sources and release their previews."""
        for source in self._items:
            self._previews.release(source_key(source.id))
        count = len(self._items)
        self._items.clear()
        logger.debug(f"Cleared {count} sources")

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def get(self, source_id: str) -> SourceDocument:
        """
        Return the source with `source_id`.

        Raises:
            NotFoundError: If the id is absent
        """
        index = self._find(source_id)
        if index is None:
            raise NotFoundError(f"Source not found: {source_id}", key=source_id)
        return self._items[index]

    def index_of(self, source_id: str) -> int:
        """Position of a source in merge order (NotFoundError if absent)."""
        index = self._find(source_id)
        if index is None:
            raise NotFoundError(f"Source not found: {source_id}", key=source_id)
        return index

    @property
    def ids(self) -> List[str]:
        """Source ids in merge order."""
        return [s.id for s in self._items]

    @property
    def total_size(self) -> int:
        """Combined byte length of all sources."""
        return sum(s.size for s in self._items)

    def __iter__(self) -> Iterator[SourceDocument]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, source_id: object) -> bool:
        return any(s.id == source_id for s in self._items)

    def _find(self, source_id: str) -> Optional[int]:
        for i, source in enumerate(self._items):
            if source.id == source_id:
                return i
        return None

    def _new_id(self) -> str:
        while True:
            candidate = uuid.uuid4().hex[:9]
            if candidate not in self:
                return candidate
