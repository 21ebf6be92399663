"""
Module: builder.controller

Purpose:
    Orchestrate the complete album printing pipeline.
    Load → Compose → Render → Metadata

Key Functions:
    - build_album(): Main entry point for printing an album

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - core.utils.serialization: Snapshot loading
    - builder.images: Image provider
    - builder.layout: Page composition
    - builder.output: PDF rendering
    - stylization.pricing: AI usage totals

Used By:
    - photobook_toolkit.__main__: CLI
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

from photobook_toolkit.core.models import Album
from photobook_toolkit.core.schemas import ValidationError
from photobook_toolkit.core.utils import load_album
from photobook_toolkit.stylization.pricing import summarize_usage

from .config import BuilderConfig
from .images import SnapshotImageProvider
from .layout import LayoutResult, compose_album
from .output import render_to_pdf

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")
METADATA_FILENAME = "build_metadata.json"


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        pdf_path: Path to the generated album PDF
        page_count: Number of pages generated (cover included)
        metadata: Build metadata dictionary
        warnings: Skipped slots, skipped spreads, geometry fallbacks
        skipped_spreads: Ids of spreads that were not printed

    Example:
        >>> result = build_album(config)
        >>> print(f"Generated {result.page_count} pages")
        >>> print(f"Build timestamp: {result.metadata['generated_at']}")
    """
    pdf_path: Path
    page_count: int
    metadata: dict
    warnings: tuple[str, ...]
    skipped_spreads: tuple[str, ...] = ()


def build_album(config: BuilderConfig) -> BuildResult:
    """
    Build a print-ready PDF from an album snapshot.

    Pipeline:
    1. Load and validate the snapshot
    2. Compose the cover and every spread
    3. Render to PDF
    4. (Optional) Write build metadata

    Per-photo, per-slot and per-spread problems only produce warnings;
    the build fails only when the snapshot cannot be read or the PDF
    cannot be written.

    Args:
        config: Build configuration

    Returns:
        BuildResult with paths and metadata

    Raises:
        BuildError: If the snapshot is unreadable or the PDF cannot be written

    Example:
        >>> config = BuilderConfig(
        ...     album_path=Path("trip.knigodar.json"),
        ...     output_dir=Path("output"),
        ... )
        >>> result = build_album(config)
        >>> print(f"Generated {result.page_count} pages")
    """
    warnings: List[str] = []
    start_time = time.perf_counter()

    logger.info(f"Starting build for {config.album_path}")

    # 1. Load snapshot
    try:
        album = load_album(config.album_path, strict=config.strict_validation)
    except FileNotFoundError as e:
        raise BuildError(f"Failed to load album: {e}") from e
    except ValidationError as e:
        raise BuildError(f"Invalid album snapshot: {e}") from e

    logger.info(
        f"Loaded album {album.title!r}: {len(album.spreads)} spreads, "
        f"{album.photo_count} photos"
    )

    # 2. Compose pages
    with SnapshotImageProvider(
        config.resolved_image_base_dir,
        attempts=config.layout.decode_attempts,
        base_delay_s=config.layout.decode_base_delay_s,
    ) as provider:
        layout = compose_album(album, config.layout, provider)
        warnings.extend(layout.warnings)

        # 3. Determine output directory
        base_dir = Path(config.output_dir) if config.output_dir else DEFAULT_OUTPUT_DIR
        if config.timestamped_output:
            output_dir = _generate_timestamped_subfolder(base_dir, album)
        else:
            output_dir = base_dir

        # 4. Render PDF
        pdf_path = output_dir / config.pdf_name
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            render_to_pdf(layout, pdf_path, title=album.title)
        except OSError as e:
            raise BuildError(f"Cannot write PDF to {pdf_path}: {e}") from e
        logger.info(f"Rendered album PDF: {pdf_path}")

    elapsed = time.perf_counter() - start_time
    logger.info(f"Album build completed in {elapsed:.2f}s")

    # 5. Write metadata
    metadata = _build_metadata(config, album, layout, pdf_path, elapsed)
    if config.write_metadata:
        _write_metadata(output_dir, metadata)
        logger.info(f"Wrote build metadata to {output_dir / METADATA_FILENAME}")

    if warnings:
        logger.info(f"Build finished with {len(warnings)} warnings")

    return BuildResult(
        pdf_path=pdf_path,
        page_count=layout.page_count,
        metadata=metadata,
        warnings=tuple(warnings),
        skipped_spreads=tuple(layout.skipped_spreads),
    )


def _generate_timestamped_subfolder(base_dir: Path, album: Album) -> Path:
    """
    Create a timestamped subfolder name inside the base directory.

    Args:
        base_dir: Base output directory
        album: Album being printed (its title becomes the slug)

    Returns:
        Path like base/20250116-103045__summer-trip
    """
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    slug = re.sub(r"[^A-Za-z0-9]+", "-", album.title or "").strip("-").lower() or "album"
    folder_name = f"{timestamp}__{slug}"

    # Handle collisions (two builds in the same second)
    output_path = base_dir / folder_name
    if output_path.exists():
        counter = 1
        while (base_dir / f"{folder_name}({counter})").exists():
            counter += 1
        output_path = base_dir / f"{folder_name}({counter})"

    return output_path


def _build_metadata(
    config: BuilderConfig,
    album: Album,
    layout: LayoutResult,
    pdf_path: Path,
    elapsed_s: float,
) -> dict:
    """
    Build metadata dictionary for a generated album.

    Contains the album identity, layout settings, AI usage totals,
    per-page manifest and all warnings.

    Example:
        >>> metadata = _build_metadata(config, album, layout, pdf_path, 1.2)
        >>> metadata['page_count']
        4
    """
    manifest = []
    for page in layout.pages:
        manifest.append({
            "page": page.index + 1,  # 1-indexed for humans
            "kind": page.kind.value,
            "spread_id": page.spread_id,
            "size_mm": [round(page.width_mm, 3), round(page.height_mm, 3)],
            "photos": [
                {"slot_id": p.slot_id, "photo_id": p.photo_id}
                for p in page.photos
            ],
            "captions": len(page.captions),
            "bubbles": [b.bubble_id for b in page.bubbles],
            "title": page.title.text if page.title else None,
        })

    layout_config = config.layout
    return {
        "generated_at": datetime.now().isoformat(),
        "album_id": album.id,
        "album_title": album.title,
        "source": str(config.album_path),
        "pdf": pdf_path.name,
        "page_count": layout.page_count,
        "spread_count": len(album.spreads),
        "photo_count": album.photo_count,
        "with_gaps": album.with_gaps,
        "page_size_mm": layout_config.page_size_mm,
        "dpi": layout_config.dpi,
        "elapsed_s": round(elapsed_s, 3),
        "skipped_spreads": list(layout.skipped_spreads),
        "ai_usage": summarize_usage(album.iter_photos()).to_dict(),
        "warnings": list(layout.warnings),
        "manifest": manifest,
    }


def _write_metadata(output_dir: Path, metadata: dict) -> None:
    """
    Write metadata JSON file to output directory.

    Raises:
        BuildError: If writing fails
    """
    metadata_path = output_dir / METADATA_FILENAME

    try:
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote metadata to {metadata_path}")
    except OSError as e:
        raise BuildError(f"Failed to write metadata: {e}") from e
