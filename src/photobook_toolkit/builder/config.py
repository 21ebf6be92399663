"""
Module: builder.config

Purpose:
    Configuration dataclass for the album build pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuilderConfig: Main configuration for building an album PDF

Dependencies:
    - dataclasses (std)
    - pathlib (std)
    - builder.layout.config: LayoutConfig

Used By:
    - builder.controller: Main build controller
    - photobook_toolkit.__main__: CLI
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from photobook_toolkit.builder.layout.config import LayoutConfig


@dataclass(frozen=True)
class BuilderConfig:
    """
    Configuration for building an album (immutable).

    Attributes:
        album_path: Snapshot JSON file (wrapped or bare)
        output_dir: Base output directory; None uses ./output
        layout: Physical page and worker configuration
        pdf_name: File name of the album PDF
        timestamped_output: Create a timestamped subfolder per build
        write_metadata: Write build_metadata.json next to the PDF
        strict_validation: Validate the snapshot with the full JSON Schema
        image_base_dir: Directory relative image paths are resolved
            against (defaults to the snapshot's directory)

    Example:
        >>> config = BuilderConfig(
        ...     album_path=Path("trip.knigodar.json"),
        ...     output_dir=Path("out"),
        ... )
    """

    # Required
    album_path: Path

    # Output
    output_dir: Optional[Path] = None
    pdf_name: str = "album.pdf"
    timestamped_output: bool = True
    write_metadata: bool = True

    # Input
    strict_validation: bool = False
    image_base_dir: Optional[Path] = None

    # Layout
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.pdf_name.lower().endswith(".pdf"):
            raise ValueError(f"pdf_name must end with .pdf: {self.pdf_name!r}")
        if "/" in self.pdf_name or "\\" in self.pdf_name:
            raise ValueError(f"pdf_name must be a bare file name: {self.pdf_name!r}")

    @property
    def resolved_image_base_dir(self) -> Path:
        return self.image_base_dir or Path(self.album_path).parent
