"""
Module: compose.previewer

Purpose:
    Incremental split previews. Keeps one preview per eligible range and
    recomposes a range only when its bounds or the bound source changed
    since its preview was made.

Key Classes:
    - SplitPreviewer: Tracks composed range signatures per range id

Dependencies:
    - compose.split: split_source()
    - engine.previews: PreviewRegistry, range_key()

Used By:
    - engine.session: AssemblySession.refresh_split_previews()
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Dict, Optional, Tuple

from pdf_toolkit.codec.base import DocumentCodec
from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.models import SourceDocument, SplitRange, SplitReport
from pdf_toolkit.engine.previews import PreviewHandle, PreviewRegistry, range_key
from pdf_toolkit.engine.ranges import RangeSet

from .split import split_source

logger = logging.getLogger(__name__)

# (source id, start, end) the live preview was composed from
_Signature = Tuple[str, int, int]


class SplitPreviewer:
    """
    Maintains split range previews in a PreviewRegistry.

    Renaming a range never triggers recomposition; names do not change
    the preview bytes.

    Attributes:
        last_recomposed: Range ids recomposed by the latest refresh()

    Example:
        >>> previewer = SplitPreviewer(codec, registry)
        >>> handles = await previewer.refresh(source, ranges)
        >>> await previewer.refresh(source, ranges)  # nothing changed
        >>> previewer.last_recomposed
        ()
    """

    def __init__(
        self,
        codec: DocumentCodec,
        previews: PreviewRegistry,
        *,
        config: Optional[AssemblyConfig] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self._codec = codec
        self._previews = previews
        self._config = config or AssemblyConfig()
        self._executor = executor
        self._composed: Dict[int, _Signature] = {}
        self._generation = 0
        self.last_recomposed: Tuple[int, ...] = ()

    async def refresh(self, source: SourceDocument, ranges: RangeSet) -> Dict[int, PreviewHandle]:
        """
        Bring range previews up to date.

        Previews of removed or now-ineligible ranges are released; stale
        or missing previews of eligible ranges are recomposed.

        Results are dropped if reset() ran during the composition, or if
        their range was removed or re-bounded meanwhile.

        Returns:
            Mapping of range id to live preview handle, in range order
        """
        current = {r.id: r for r in ranges}
        for range_id in list(self._composed):
            if range_id not in current:
                self._forget(range_id)

        stale: Dict[int, _Signature] = {}
        for split_range in current.values():
            if not split_range.is_eligible(ranges.total_pages):
                self._forget(split_range.id)
                continue
            signature = _signature(source, split_range)
            if self._composed.get(split_range.id) == signature and range_key(split_range.id) in self._previews:
                continue
            stale[split_range.id] = signature

        if stale:
            generation = self._generation
            report = await split_source(
                source,
                [current[range_id] for range_id in stale],
                self._codec,
                config=self._config,
                executor=self._executor,
            )
            if generation != self._generation:
                logger.debug(f"Discarded {len(report)} previews composed before a reset")
            else:
                self._store(source, ranges, stale, report)

        self.last_recomposed = tuple(stale)
        if stale:
            logger.debug(f"Recomposed previews for ranges {list(stale)}")

        handles: Dict[int, PreviewHandle] = {}
        for split_range in ranges:
            handle = self._previews.get(range_key(split_range.id))
            if handle is not None:
                handles[split_range.id] = handle
        return handles

    def reset(self) -> None:
        """Release every preview this previewer made."""
        self._generation += 1
        for range_id in list(self._composed):
            self._forget(range_id)

    def _store(
        self,
        source: SourceDocument,
        ranges: RangeSet,
        stale: Dict[int, _Signature],
        report: SplitReport,
    ) -> None:
        live = {r.id: r for r in ranges}
        for result in report:
            split_range = live.get(result.range_id)
            if split_range is None or _signature(source, split_range) != stale[result.range_id]:
                logger.debug(f"Discarded outdated preview for range {result.range_id}")
                continue
            self._previews.acquire(range_key(result.range_id), result.data)
            self._composed[result.range_id] = stale[result.range_id]
        for failure in report.failures:
            self._forget(failure.range_id)

    def _forget(self, range_id: int) -> None:
        self._composed.pop(range_id, None)
        self._previews.release(range_key(range_id))


def _signature(source: SourceDocument, split_range: SplitRange) -> _Signature:
    return (source.id, split_range.start, split_range.end)
