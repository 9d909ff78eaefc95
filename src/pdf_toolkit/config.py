"""
Module: config

Purpose:
    Configuration dataclass for the assembly engine. Immutable
    configuration with validation on construction.

Key Classes:
    - AssemblyConfig: Naming, serialization and worker settings

Dependencies:
    - dataclasses (std)

Used By:
    - engine.session: Session context
    - compose.merge / compose.split: Output naming
    - codec.fitz_codec: Serialization options
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AssemblyConfig:
    """
    Configuration for an editing session (immutable).
    
    Attributes:
        output_extension: Container extension appended to output names
        default_merge_name: Output name used when none is given
        range_name_prefix: Prefix for auto-named split ranges ("Part 3")
        thumbnail_dpi: Resolution for preview thumbnails
        max_workers: Threads available for codec work
        garbage_level: PyMuPDF garbage collection level on save (0-4)
        deflate: Compress streams on save
        sniff_window: Bytes scanned for the container signature
    
    Example:
        >>> config = AssemblyConfig(default_merge_name="combined")
        >>> config.output_extension
        '.pdf'
    """
    
    # Naming
    output_extension: str = ".pdf"
    default_merge_name: str = "merged"
    range_name_prefix: str = "Part"
    
    # Rendering
    thumbnail_dpi: int = 72
    
    # Execution
    max_workers: int = 2
    
    # Serialization
    garbage_level: int = 3
    deflate: bool = True
    sniff_window: int = 1024
    
    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.output_extension.startswith("."):
            raise ValueError(f"output_extension must start with '.': {self.output_extension!r}")
        if not self.default_merge_name.strip():
            raise ValueError("default_merge_name must not be blank")
        if self.thumbnail_dpi <= 0:
            raise ValueError(f"thumbnail_dpi must be positive: {self.thumbnail_dpi}")
        if self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive: {self.max_workers}")
        if not 0 <= self.garbage_level <= 4:
            raise ValueError(f"garbage_level must be in 0..4: {self.garbage_level}")
        if self.sniff_window < 5:
            raise ValueError(f"sniff_window too small: {self.sniff_window}")
