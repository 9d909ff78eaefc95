"""
Module: codec

Purpose:
    Document codec capability consumed by the compositors: decode bytes
    to pages, copy pages, create blank pages and serialize a page list.

Key Classes:
    - DocumentCodec: Abstract codec interface
    - FitzCodec: PyMuPDF implementation
    - DecodedDocument, PageRef, BlankPage, PageSize: Page handles

Dependencies:
    - fitz (PyMuPDF): PDF parsing and writing
    - PIL: Thumbnail images

Used By:
    - engine: Format checks and page counts
    - compose: Merge and split compositions
"""

from .base import BlankPage, DecodedDocument, DocumentCodec, PageHandle, PageRef, PageSize
from .fitz_codec import FitzCodec, PDF_SIGNATURE

__all__ = [
    "BlankPage",
    "DecodedDocument",
    "DocumentCodec",
    "PageHandle",
    "PageRef",
    "PageSize",
    "FitzCodec",
    "PDF_SIGNATURE",
]
