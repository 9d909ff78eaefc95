"""
Module: compose.merge

Purpose:
    Merge compositor. Concatenates the pages of every source, in
    collection order, into one output document, optionally inserting a
    blank separator page after each source except the last.

Key Functions:
    - merge_sources(): Awaitable merge (codec work runs in an executor)
    - compose_merge(): Blocking merge body

Dependencies:
    - asyncio (std): Suspend point around codec work
    - codec.base: DocumentCodec
    - core.models: SourceDocument, CompositionResult

Used By:
    - engine.session: AssemblySession.merge()
    - cli: merge subcommand
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from functools import partial
from typing import Iterable, List, Optional, Sequence

from pdf_toolkit.codec.base import DecodedDocument, DocumentCodec, PageHandle
from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.errors import CodecError, EmptyInputError, UnsupportedFormatError
from pdf_toolkit.core.models import CompositionResult, SourceDocument
from pdf_toolkit.core.naming import ensure_extension

logger = logging.getLogger(__name__)


async def merge_sources(
    sources: Iterable[SourceDocument],
    codec: DocumentCodec,
    *,
    insert_separators: bool = False,
    output_name: Optional[str] = None,
    config: Optional[AssemblyConfig] = None,
    executor: Optional[Executor] = None,
) -> CompositionResult:
    """
    Merge sources into one document.

    The sources are snapshotted when the merge starts, so later edits to the
    collection do not affect a merge in flight.

    Args:
        sources: Sources in merge order (e.g. a SourceCollection)
        codec: Document codec
        insert_separators: Add a blank page after each source but the last
        output_name: Output name; defaults to config.default_merge_name
        config: Naming settings (defaults to AssemblyConfig())
        executor: Executor for codec work (None = loop default)

    Returns:
        CompositionResult for the merged document

    Raises:
        EmptyInputError: If there are no sources
        CodecError: If any source fails; nothing is returned in that case

    Example:
        >>> result = await merge_sources(collection, codec, insert_separators=True)
        >>> result.name
        'merged.pdf'
    """
    cfg = config or AssemblyConfig()
    snapshot = list(sources)
    if not snapshot:
        raise EmptyInputError("Merge requires at least one source")

    name = ensure_extension(output_name, cfg.output_extension, cfg.default_merge_name)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor,
        partial(compose_merge, snapshot, codec, insert_separators=insert_separators, name=name),
    )


def compose_merge(
    sources: Sequence[SourceDocument],
    codec: DocumentCodec,
    *,
    insert_separators: bool,
    name: str,
) -> CompositionResult:
    """
    Blocking merge body (all-or-nothing).

    Each source is decoded and all of its pages are taken in index order.
    A separator page uses the first page size of the source it follows.
    Every decoded document is closed before returning or raising.

    Raises:
        EmptyInputError: If there are no sources
        CodecError: Identifying the failing source
    """
    if not sources:
        raise EmptyInputError("Merge requires at least one source")

    decoded: List[DecodedDocument] = []
    pages: List[PageHandle] = []
    try:
        last = len(sources) - 1
        for position, source in enumerate(sources):
            try:
                document = codec.decode(source.data, name=source.name)
                decoded.append(document)
                pages.extend(codec.copy_pages(document, range(document.page_count)))
                if insert_separators and position < last:
                    size = document.first_page_size
                    if size is not None:
                        pages.append(codec.create_blank_page(size.width, size.height))
            except (UnsupportedFormatError, CodecError) as e:
                logger.error(f"Merge aborted at source {position + 1} ({source.name}): {e}")
                raise CodecError(
                    f"Failed to process {source.name}: {e}",
                    source_id=source.id,
                    name=source.name,
                ) from e

        try:
            data = codec.serialize(pages)
        except CodecError as e:
            failing = next((s for s in sources if e.name is not None and s.name == e.name), None)
            if failing is None:
                raise
            logger.error(f"Merge aborted while copying {failing.name}: {e}")
            raise CodecError(
                f"Failed to process {failing.name}: {e}",
                source_id=failing.id,
                name=failing.name,
            ) from e
    finally:
        for document in decoded:
            document.close()

    logger.info(f"Merged {len(sources)} sources into {name} ({len(pages)} pages, {len(data)} bytes)")
    return CompositionResult(
        name=name,
        data=data,
        page_count=len(pages),
        source_ids=tuple(s.id for s in sources),
    )
