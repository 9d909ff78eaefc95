"""
Module: engine.session

Purpose:
    Explicit editing-session context. Owns the preview registry, the
    merge source collection, the split source with its range set, and
    the executor used for codec work. Closing the session revokes every
    preview.

Key Classes:
    - AssemblySession: Session context passed to UI callbacks

Dependencies:
    - concurrent.futures (std): ThreadPoolExecutor for codec work
    - codec.fitz_codec: Default codec
    - compose: merge_sources(), split_source(), SplitPreviewer

Used By:
    - cli: Command line host
    - UI layers embedding the engine
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Dict, Hashable, Iterable, Optional, Tuple

from PIL import Image

from pdf_toolkit.codec.base import DocumentCodec
from pdf_toolkit.codec.fitz_codec import FitzCodec
from pdf_toolkit.compose.merge import merge_sources
from pdf_toolkit.compose.previewer import SplitPreviewer
from pdf_toolkit.compose.split import split_source
from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.errors import NotFoundError, UnsupportedFormatError
from pdf_toolkit.core.models import CompositionResult, SourceDocument, SplitReport

from .previews import PreviewHandle, PreviewRegistry, source_key
from .ranges import RangeSet
from .sources import AddResult, SourceCollection

logger = logging.getLogger(__name__)


class AssemblySession:
    """
    One in-memory editing session.

    Nothing is persisted; all state lives until close(). The session is
    a context manager and closes itself on exit.

    Attributes:
        config: Session configuration
        codec: Document codec shared by all operations
        previews: Registry holding every live preview of this session
        sources: Ordered sources for merging

    Example:
        >>> with AssemblySession() as session:
        ...     session.add_sources([("a.pdf", a), ("b.pdf", b)])
        ...     result = asyncio.run(session.merge(insert_separators=True))
    """

    def __init__(
        self,
        config: Optional[AssemblyConfig] = None,
        codec: Optional[DocumentCodec] = None,
    ) -> None:
        self.config = config or AssemblyConfig()
        self.codec = codec or FitzCodec(self.config)
        self.previews = PreviewRegistry()
        self.sources = SourceCollection(self.codec, self.previews)
        self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="pdf-toolkit")
        self._previewer = SplitPreviewer(self.codec, self.previews, config=self.config, executor=self._executor)
        self._split_source: Optional[SourceDocument] = None
        self._ranges: Optional[RangeSet] = None
        self._closed = False

    # ─────────────────────────────────────────────────────────────────────────
    # Merge
    # ─────────────────────────────────────────────────────────────────────────

    def add_sources(self, inputs: Iterable[Tuple[str, bytes]]) -> AddResult:
        """Append merge sources (see SourceCollection.add)."""
        self._check_open()
        return self.sources.add(inputs)

    async def merge(
        self,
        *,
        insert_separators: bool = False,
        output_name: Optional[str] = None,
    ) -> CompositionResult:
        """Merge the current sources in collection order."""
        self._check_open()
        return await merge_sources(
            self.sources,
            self.codec,
            insert_separators=insert_separators,
            output_name=output_name,
            config=self.config,
            executor=self._executor,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Split
    # ─────────────────────────────────────────────────────────────────────────

    def load_split_source(self, name: str, data: bytes) -> RangeSet:
        """
        Bind a new split source and reset the range set.

        The source is decoded immediately to learn its page count. On
        failure the previous source and ranges are left untouched.

        Returns:
            The new RangeSet, seeded with one full-span range

        Raises:
            UnsupportedFormatError: If the bytes cannot be decoded
        """
        self._check_open()
        source = SourceDocument(
            id=uuid.uuid4().hex[:9],
            name=name,
            data=data,
            page_counter=partial(self.codec.count_pages, name=name),
        )
        try:
            total_pages = source.page_count
        except UnsupportedFormatError:
            logger.warning(f"Rejected split source {name!r}")
            raise

        self._clear_split()
        self._split_source = source
        self._ranges = RangeSet(total_pages, self.previews, name_prefix=self.config.range_name_prefix)
        self.previews.acquire(source_key(source.id), data)
        logger.info(f"Loaded split source {name} ({total_pages} pages)")
        return self._ranges

    @property
    def split_source(self) -> Optional[SourceDocument]:
        """The bound split source, if any."""
        return self._split_source

    @property
    def ranges(self) -> RangeSet:
        """
        Range set of the bound split source.

        Raises:
            NotFoundError: If no split source is loaded
        """
        if self._ranges is None:
            raise NotFoundError("No split source loaded")
        return self._ranges

    async def split(self) -> SplitReport:
        """Compose one output per eligible range of the split source."""
        self._check_open()
        source, ranges = self._require_split()
        return await split_source(source, ranges, self.codec, config=self.config, executor=self._executor)

    async def refresh_split_previews(self) -> Dict[int, PreviewHandle]:
        """
        Recompose previews for ranges whose bounds changed.

        A refresh still running when the session closes is abandoned and
        returns no handles.
        """
        self._check_open()
        source, ranges = self._require_split()
        try:
            return await self._previewer.refresh(source, ranges)
        except RuntimeError:
            if not self._closed:
                raise
            logger.debug("Preview refresh abandoned: session closed")
            return {}

    def clear_split(self) -> None:
        """Unbind the split source and release its previews."""
        self._clear_split()

    # ─────────────────────────────────────────────────────────────────────────
    # Previews
    # ─────────────────────────────────────────────────────────────────────────

    def thumbnail(self, key: Hashable, page_index: int = 0) -> Image.Image:
        """
        Render a page of a live preview as an image.

        Raises:
            NotFoundError: If `key` holds no live preview
        """
        handle = self.previews.get(key)
        if handle is None:
            raise NotFoundError(f"No preview for {key!r}", key=key)
        return self.codec.render_thumbnail(self.previews.read(handle), page_index, dpi=self.config.thumbnail_dpi)

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Revoke all previews and stop the executor. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._previewer.reset()
        released = self.previews.release_all()
        self._executor.shutdown(wait=True)
        logger.debug(f"Session closed ({released} previews released)")

    def __enter__(self) -> "AssemblySession":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _clear_split(self) -> None:
        self._previewer.reset()
        if self._ranges is not None:
            for range_id in self._ranges.ids:
                self._ranges.remove(range_id)
        if self._split_source is not None:
            self.previews.release(source_key(self._split_source.id))
        self._split_source = None
        self._ranges = None

    def _require_split(self) -> Tuple[SourceDocument, RangeSet]:
        if self._split_source is None or self._ranges is None:
            raise NotFoundError("No split source loaded")
        return self._split_source, self._ranges

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")
