"""Top-level package for the PDF Assembly Toolkit.

Provides subpackages:
- pdf_toolkit.codec – document codec interface and the PyMuPDF backend
- pdf_toolkit.engine – source collection, range set, previews and session
- pdf_toolkit.compose – merge and split compositors
- pdf_toolkit.cli – command line host
"""

from importlib.metadata import PackageNotFoundError, version as _dist_version


def _get_version() -> str:
    """Installed distribution version, or 0.0.0 when running from a checkout."""
    try:
        return _dist_version("pdf-assembly-toolkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

from .config import AssemblyConfig
from .core.errors import (
    AssemblyError,
    CodecError,
    CorruptInputError,
    EmptyInputError,
    NotFoundError,
    UnsupportedFormatError,
    user_message,
)
from .core.models import CompositionResult, SourceDocument, SplitRange, SplitReport
from .engine.session import AssemblySession

__all__: list[str] = [
    "__version__",
    "AssemblyConfig",
    "AssemblySession",
    "AssemblyError",
    "CodecError",
    "CorruptInputError",
    "EmptyInputError",
    "NotFoundError",
    "UnsupportedFormatError",
    "user_message",
    "CompositionResult",
    "SourceDocument",
    "SplitRange",
    "SplitReport",
]
