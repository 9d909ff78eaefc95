"""
Module: core.naming

Purpose:
    Output-name and display helpers shared by the compositors and the CLI.

Key Functions:
    - ensure_extension(): Default and suffix an output name
    - format_file_size(): Human-readable byte counts
"""

from __future__ import annotations

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def ensure_extension(name: str | None, extension: str, default: str = "") -> str:
    """
    Normalize an output name and append the container extension if absent.
    
    Args:
        name: Requested name (may be None or blank)
        extension: Extension including the dot, e.g. ".pdf"
        default: Name used when `name` is blank
        
    Returns:
        Name ending with `extension`
        
    Example:
        >>> ensure_extension("  report ", ".pdf")
        'report.pdf'
        >>> ensure_extension("", ".pdf", default="merged")
        'merged.pdf'
    """
    final = (name or "").strip() or default
    if final.endswith(extension):
        return final
    return f"{final}{extension}"


def format_file_size(size: int) -> str:
    """
    Format a byte count using base-1024 units.
    
    Example:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    # Drop trailing zeros: 2.0 -> "2", 1.50 -> "1.5"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"
