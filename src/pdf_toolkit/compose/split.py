"""
Module: compose.split

Purpose:
    Split compositor. Decodes one source once and produces one output
    document per eligible range, in range order. Ineligible ranges are
    skipped without error; a failing range does not abort its siblings.

Key Functions:
    - split_source(): Awaitable split over a set of ranges
    - compose_range(): Blocking composition of one range

Dependencies:
    - asyncio (std): Suspend points around codec work
    - codec.base: DocumentCodec, DecodedDocument
    - core.models: SplitRange, CompositionResult, SplitReport

Used By:
    - engine.session: AssemblySession.split()
    - compose.previewer: Split range previews
    - cli: split subcommand
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from functools import partial
from typing import Iterable, List, Optional

from pdf_toolkit.codec.base import DecodedDocument, DocumentCodec
from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.errors import CodecError, UnsupportedFormatError
from pdf_toolkit.core.models import CompositionResult, SourceDocument, SplitRange, SplitReport
from pdf_toolkit.core.naming import ensure_extension

logger = logging.getLogger(__name__)


async def split_source(
    source: SourceDocument,
    ranges: Iterable[SplitRange],
    codec: DocumentCodec,
    *,
    config: Optional[AssemblyConfig] = None,
    executor: Optional[Executor] = None,
) -> SplitReport:
    """
    Split a source into one document per eligible range.

    A range is eligible iff 1 <= start <= end <= N, where N is the page
    count of the decoded source. Ranges are composed one after another
    on the single decoded document.

    Args:
        source: Document to split
        ranges: Ranges in output order (e.g. a RangeSet)
        codec: Document codec
        config: Naming settings (defaults to AssemblyConfig())
        executor: Executor for codec work (None = loop default)

    Returns:
        SplitReport with results, skipped range ids and per-range failures

    Raises:
        CodecError: If the source itself cannot be decoded

    Example:
        >>> report = await split_source(source, range_set, codec)
        >>> [(r.name, r.page_count) for r in report]
        [('Part 1.pdf', 3)]
    """
    cfg = config or AssemblyConfig()
    snapshot = list(ranges)
    loop = asyncio.get_running_loop()

    document = await loop.run_in_executor(executor, partial(_decode_source, codec, source))

    results: List[CompositionResult] = []
    skipped: List[int] = []
    failures: List[CodecError] = []
    try:
        for split_range in snapshot:
            if not split_range.is_eligible(document.page_count):
                skipped.append(split_range.id)
                continue
            try:
                result = await loop.run_in_executor(
                    executor,
                    partial(compose_range, document, split_range, codec, config=cfg, source_id=source.id),
                )
            except CodecError as e:
                logger.error(f"Range {split_range.id} ({split_range.name}) failed: {e}")
                failures.append(
                    CodecError(
                        f"Failed to create {split_range.name}: {e}",
                        source_id=source.id,
                        range_id=split_range.id,
                        name=split_range.name,
                    )
                )
                continue
            results.append(result)
    finally:
        document.close()

    if skipped:
        logger.warning(f"Skipped {len(skipped)} ineligible ranges of {source.name}: {skipped}")
    logger.info(f"Split {source.name} into {len(results)} documents")
    return SplitReport(tuple(results), tuple(skipped), tuple(failures))


def compose_range(
    document: DecodedDocument,
    split_range: SplitRange,
    codec: DocumentCodec,
    *,
    config: Optional[AssemblyConfig] = None,
    source_id: Optional[str] = None,
) -> CompositionResult:
    """
    Copy pages [start-1 .. end-1] of a decoded document into a new one.

    Raises:
        CodecError: If copying or serialization fails
    """
    cfg = config or AssemblyConfig()
    pages = codec.copy_pages(document, split_range.page_indices())
    data = codec.serialize(pages)
    name = ensure_extension(
        split_range.name,
        cfg.output_extension,
        default=f"{cfg.range_name_prefix} {split_range.id}",
    )
    logger.debug(f"Composed {name}: pages {split_range.start}-{split_range.end} ({len(data)} bytes)")
    return CompositionResult(
        name=name,
        data=data,
        page_count=len(pages),
        source_ids=(source_id,) if source_id else (),
        range_id=split_range.id,
    )


def _decode_source(codec: DocumentCodec, source: SourceDocument) -> DecodedDocument:
    try:
        return codec.decode(source.data, name=source.name)
    except UnsupportedFormatError as e:
        raise CodecError(
            f"Failed to decode {source.name}: {e}",
            source_id=source.id,
            name=source.name,
        ) from e
