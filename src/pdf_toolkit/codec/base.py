"""
Module: codec.base

Purpose:
    Abstract interface for the document codec and the page handle
    values passed between the codec and the compositors.

Key Classes:
    - DocumentCodec: Abstract base class for codec backends
    - DecodedDocument: A decoded source with page count and sizes
    - PageRef: Handle to one page of a decoded document
    - BlankPage: Handle to a blank page of a given size
    - PageSize: Page dimensions in points

Dependencies:
    - PIL: Thumbnail return type
    - core.errors: CodecError

Used By:
    - codec.fitz_codec: PyMuPDF backend
    - compose.merge / compose.split: Page assembly
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from PIL import Image

from pdf_toolkit.core.errors import CodecError


@dataclass(frozen=True)
class PageSize:
    """Page dimensions in PDF points (1/72 inch)."""
    width: float
    height: float


@dataclass(eq=False)
class DecodedDocument:
    """
    A decoded source document.
    
    Wraps the backend's native document object. Must be closed once the
    composition that decoded it has finished; usable as a context manager.
    
    Attributes:
        native: Backend document object (e.g. fitz.Document)
        page_sizes: Size of every page, in page order
        name: Display name of the source (for error messages)
    """
    
    native: Any = field(repr=False)
    page_sizes: Tuple[PageSize, ...]
    name: Optional[str] = None
    closer: Optional[Callable[[], None]] = field(default=None, repr=False)
    closed: bool = field(default=False, init=False)
    
    @property
    def page_count(self) -> int:
        """Number of pages in the document."""
        return len(self.page_sizes)
    
    @property
    def first_page_size(self) -> Optional[PageSize]:
        """Size of the first page, or None for an empty document."""
        return self.page_sizes[0] if self.page_sizes else None
    
    def close(self) -> None:
        """Release the native document. Idempotent."""
        if not self.closed:
            self.closed = True
            if self.closer is not None:
                self.closer()
    
    def __enter__(self) -> "DecodedDocument":
        return self
    
    def __exit__(self, *args) -> None:
        self.close()


@dataclass(frozen=True, eq=False)
class PageRef:
    """Handle to page `index` (0-based) of a decoded document."""
    document: DecodedDocument
    index: int


@dataclass(frozen=True)
class BlankPage:
    """Handle to a blank page of the given size in points."""
    width: float
    height: float


PageHandle = Union[PageRef, BlankPage]


class DocumentCodec(ABC):
    """
    Abstract document codec.
    
    Backends implement decoding, serialization and rendering; page
    copying and blank pages are plain handle operations shared by all
    backends.
    """
    
    @abstractmethod
    def sniff(self, data: bytes) -> bool:
        """
        Cheap check whether `data` looks like a supported container.
        
        Args:
            data: Raw bytes
            
        Returns:
            True if the container signature is present
        """
    
    @abstractmethod
    def decode(self, data: bytes, *, name: Optional[str] = None) -> DecodedDocument:
        """
        Decode bytes into a document.
        
        Args:
            data: Raw document bytes
            name: Display name used in error messages
            
        Returns:
            DecodedDocument (caller must close it)
            
        Raises:
            UnsupportedFormatError: Bytes are not a supported container
            CorruptInputError: Container is present but unreadable
        """
    
    @abstractmethod
    def serialize(self, pages: Sequence[PageHandle]) -> bytes:
        """
        Write an ordered page list into a new document.
        
        Args:
            pages: Page handles in output order
            
        Returns:
            Serialized document bytes
            
        Raises:
            CodecError: If the document cannot be written
        """
    
    @abstractmethod
    def render_thumbnail(self, data: bytes, page_index: int = 0, dpi: int = 72) -> Image.Image:
        """
        Rasterize one page of a document for display.
        
        Args:
            data: Raw document bytes
            page_index: 0-based page to render
            dpi: Render resolution
            
        Returns:
            RGB PIL Image
        """
    
    def copy_pages(self, source: DecodedDocument, indices: Sequence[int]) -> List[PageRef]:
        """
        Select pages of a decoded document, preserving the given order.
        
        Duplicate indices yield the page more than once.
        
        Args:
            source: Decoded source document
            indices: 0-based page indices in output order
            
        Returns:
            List of PageRefs in the same order as `indices`
            
        Raises:
            CodecError: If the document is closed or an index is out of range
        """
        if source.closed:
            raise CodecError(f"Cannot copy pages from closed document {source.name!r}", name=source.name)
        refs: List[PageRef] = []
        for index in indices:
            if not 0 <= index < source.page_count:
                raise CodecError(
                    f"Page index {index} out of range for {source.name!r} ({source.page_count} pages)",
                    name=source.name,
                )
            refs.append(PageRef(source, index))
        return refs
    
    def create_blank_page(self, width: float, height: float) -> BlankPage:
        """
        Create a blank page handle.
        
        Raises:
            CodecError: If either dimension is not positive
        """
        if width <= 0 or height <= 0:
            raise CodecError(f"Invalid blank page size: {width} x {height}")
        return BlankPage(width, height)
    
    def count_pages(self, data: bytes, *, name: Optional[str] = None) -> int:
        """Decode `data` just long enough to read its page count."""
        with self.decode(data, name=name) as document:
            return document.page_count
