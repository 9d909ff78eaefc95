"""
Module: codec.fitz_codec

Purpose:
    PyMuPDF implementation of the document codec. Decodes PDF bytes,
    assembles page lists into new PDFs and renders page thumbnails.

Key Classes:
    - FitzCodec: DocumentCodec backed by fitz (PyMuPDF)

Dependencies:
    - fitz (PyMuPDF): PDF parsing, page insertion and saving
    - PIL.Image: Thumbnail images
    - threading (std): Serializes MuPDF calls

Used By:
    - engine.session: Default codec for a session
    - cli: Command line host
"""

from __future__ import annotations

import logging
import threading
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import fitz
from PIL import Image

from pdf_toolkit.config import AssemblyConfig
from pdf_toolkit.core.errors import CodecError, CorruptInputError, UnsupportedFormatError

from .base import BlankPage, DecodedDocument, DocumentCodec, PageHandle, PageRef, PageSize

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"


class FitzCodec(DocumentCodec):
    """
    Document codec backed by PyMuPDF.

    MuPDF is not safe for concurrent use from several threads, so every
    call into fitz is made while holding one codec-wide lock. Compositions
    may still be awaited concurrently; their codec work is serialized.

    Attributes:
        config: Serialization and sniffing settings

    Example:
        >>> codec = FitzCodec()
        >>> with codec.decode(pdf_bytes, name="a.pdf") as doc:
        ...     pages = codec.copy_pages(doc, [0, 1])
        ...     out = codec.serialize(pages)
    """

    def __init__(self, config: Optional[AssemblyConfig] = None) -> None:
        self.config = config or AssemblyConfig()
        self._lock = threading.RLock()

    def sniff(self, data: bytes) -> bool:
        """Check for the PDF signature within the configured window."""
        return PDF_SIGNATURE in data[: self.config.sniff_window]

    def decode(self, data: bytes, *, name: Optional[str] = None) -> DecodedDocument:
        """
        Decode PDF bytes into a DecodedDocument.

        Raises:
            UnsupportedFormatError: No PDF signature, or password protected
            CorruptInputError: Signature present but MuPDF cannot open it,
                or the document has no pages
        """
        label = name or "document"
        if not self.sniff(data):
            raise UnsupportedFormatError(f"{label} is not a PDF document", name=name)

        with self._lock:
            try:
                native = fitz.open(stream=data, filetype="pdf")
            except (RuntimeError, ValueError) as e:
                raise CorruptInputError(f"Failed to open {label}: {e}", name=name) from e

            if native.needs_pass:
                native.close()
                raise UnsupportedFormatError(f"{label} is password protected", name=name)

            if native.page_count == 0:
                native.close()
                raise CorruptInputError(f"{label} contains no pages", name=name)

            sizes = tuple(PageSize(page.rect.width, page.rect.height) for page in native)

        logger.debug(f"Decoded {label}: {len(sizes)} pages")
        return DecodedDocument(native=native, page_sizes=sizes, name=name, closer=self._closer(native))

    def serialize(self, pages: Sequence[PageHandle]) -> bytes:
        """
        Build a new PDF from page handles and return its bytes.

        Contiguous ascending pages from the same source are inserted
        with a single insert_pdf() call.

        Raises:
            CodecError: Empty page list, closed source, or MuPDF failure
                (carrying the source name when copying from it failed)
        """
        if not pages:
            raise CodecError("Cannot serialize a document with zero pages")

        with self._lock:
            out = fitz.open()
            try:
                for run in _page_runs(pages):
                    if isinstance(run, BlankPage):
                        out.new_page(width=run.width, height=run.height)
                        continue
                    document, first, last = run
                    if document.closed:
                        raise CodecError(f"Source {document.name!r} was closed before serialization", name=document.name)
                    try:
                        out.insert_pdf(document.native, from_page=first, to_page=last)
                    except (RuntimeError, ValueError) as e:
                        raise CodecError(
                            f"Failed to copy pages {first}-{last} of {document.name!r}: {e}",
                            name=document.name,
                        ) from e
                return out.tobytes(garbage=self.config.garbage_level, deflate=self.config.deflate)
            except (RuntimeError, ValueError) as e:
                raise CodecError(f"Failed to serialize document: {e}") from e
            finally:
                out.close()

    def render_thumbnail(self, data: bytes, page_index: int = 0, dpi: int = 72) -> Image.Image:
        """
        Render one page to an RGB image.

        Raises:
            UnsupportedFormatError / CorruptInputError: Undecodable bytes
            CodecError: Page index out of range or render failure
        """
        with self.decode(data) as document:
            if not 0 <= page_index < document.page_count:
                raise CodecError(f"Page index {page_index} out of range ({document.page_count} pages)")
            matrix = fitz.Matrix(dpi / 72.0, dpi / 72.0)
            with self._lock:
                try:
                    pix = document.native[page_index].get_pixmap(matrix=matrix, alpha=False)
                except (RuntimeError, ValueError) as e:
                    raise CodecError(f"Failed to render page {page_index}: {e}") from e
            return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    def _closer(self, native: fitz.Document):
        def close() -> None:
            with self._lock:
                native.close()
        return close


def _page_runs(
    pages: Sequence[PageHandle],
) -> Iterator[Union[BlankPage, Tuple[DecodedDocument, int, int]]]:
    """
    Group page handles into insertable runs.

    Yields BlankPage handles as-is and (document, first, last) tuples for
    maximal runs of consecutive ascending pages from one document.

    Example:
        >>> list(_page_runs([PageRef(d, 0), PageRef(d, 1), BlankPage(1, 1), PageRef(d, 1)]))
        [(d, 0, 1), BlankPage(1, 1), (d, 1, 1)]
    """
    current: List[PageRef] = []
    for handle in pages:
        if isinstance(handle, BlankPage):
            if current:
                yield current[0].document, current[0].index, current[-1].index
                current = []
            yield handle
            continue
        if current and (handle.document is not current[-1].document or handle.index != current[-1].index + 1):
            yield current[0].document, current[0].index, current[-1].index
            current = []
        current.append(handle)
    if current:
        yield current[0].document, current[0].index, current[-1].index
