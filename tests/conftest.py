import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import fitz
import pytest

# Add src to sys.path so we can import pdf_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from pdf_toolkit.codec.fitz_codec import FitzCodec
from pdf_toolkit.engine.previews import PreviewRegistry


A4 = (595.0, 842.0)
LETTER = (612.0, 792.0)


def build_pdf(labels: Sequence[str], sizes: Optional[Sequence[Tuple[float, float]]] = None) -> bytes:
    """Build an in-memory PDF with one labelled page per entry in `labels`."""
    doc = fitz.open()
    for i, label in enumerate(labels):
        width, height = sizes[i] if sizes else A4
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), label)
    data = doc.tobytes()
    doc.close()
    return data


def read_labels(data: bytes) -> List[str]:
    """Return the text of every page of a PDF ("" for blank pages)."""
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


def read_sizes(data: bytes) -> List[Tuple[float, float]]:
    """Return (width, height) of every page of a PDF."""
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [(round(page.rect.width), round(page.rect.height)) for page in doc]


# Common test fixtures
@pytest.fixture
def make_pdf():
    """Factory for labelled in-memory PDFs."""
    return build_pdf


@pytest.fixture
def labels_of():
    """Reader for page labels of PDF bytes."""
    return read_labels


@pytest.fixture
def sizes_of():
    """Reader for page sizes of PDF bytes."""
    return read_sizes


@pytest.fixture
def codec():
    """A fresh PyMuPDF codec."""
    return FitzCodec()


@pytest.fixture
def registry():
    """A fresh preview registry."""
    return PreviewRegistry()


@pytest.fixture
def ten_page_pdf():
    """PDF with pages labelled P1..P10."""
    return build_pdf([f"P{i}" for i in range(1, 11)])
