"""
Command line entry point.

    python -m photobook_toolkit build album.knigodar.json -o out/
    python -m photobook_toolkit validate album.knigodar.json --strict
    python -m photobook_toolkit templates
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from photobook_toolkit import __version__
from photobook_toolkit.builder import BuildError, BuilderConfig, LogCapture, build_album
from photobook_toolkit.builder.layout import LayoutConfig
from photobook_toolkit.builder.templates import SPREAD_TEMPLATES
from photobook_toolkit.core.schemas import ValidationError
from photobook_toolkit.core.utils import load_album

logger = logging.getLogger("photobook_toolkit.cli")


def _cmd_build(args: argparse.Namespace) -> int:
    config = BuilderConfig(
        album_path=args.album,
        output_dir=args.output,
        pdf_name=args.pdf_name,
        timestamped_output=not args.no_timestamp,
        write_metadata=not args.no_metadata,
        strict_validation=args.strict,
        image_base_dir=args.images,
        layout=LayoutConfig(dpi=args.dpi, max_workers=args.workers),
    )
    try:
        with LogCapture() as capture:
            result = build_album(config)
    except BuildError as e:
        logger.error(f"Build failed: {e}")
        return 1

    print(f"{result.pdf_path} ({result.page_count} pages, {capture.summary()})")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        album = load_album(args.album, strict=args.strict)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except ValidationError as e:
        logger.error(f"Invalid snapshot: {e}")
        for error in e.errors:
            logger.error(f"  {error}")
        return 1

    print(f"OK: {album.title!r}, {len(album.spreads)} spreads, {album.photo_count} photos")
    return 0


def _cmd_templates(args: argparse.Namespace) -> int:
    for template in SPREAD_TEMPLATES:
        left, right = template.slot_counts
        flag = " [panoramic]" if template.panoramic else ""
        print(f"{template.id:<12} {left}+{right} slots  {template.name}{flag}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photobook-build",
        description="Print-ready PDF builder for photobook albums",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Render an album snapshot to PDF")
    build.add_argument("album", type=Path, help="Album snapshot JSON")
    build.add_argument("-o", "--output", type=Path, default=None, help="Output directory")
    build.add_argument("--pdf-name", default="album.pdf", help="PDF file name")
    build.add_argument("--images", type=Path, default=None, help="Base directory for relative image paths")
    build.add_argument("--dpi", type=int, default=300, help="Print resolution")
    build.add_argument("--workers", type=int, default=4, help="Image worker threads")
    build.add_argument("--strict", action="store_true", help="Full JSON Schema validation")
    build.add_argument("--no-timestamp", action="store_true", help="Write directly into the output directory")
    build.add_argument("--no-metadata", action="store_true", help="Skip build_metadata.json")
    build.set_defaults(func=_cmd_build)

    validate = sub.add_parser("validate", help="Check an album snapshot")
    validate.add_argument("album", type=Path, help="Album snapshot JSON")
    validate.add_argument("--strict", action="store_true", help="Full JSON Schema validation")
    validate.set_defaults(func=_cmd_validate)

    templates = sub.add_parser("templates", help="List spread templates")
    templates.set_defaults(func=_cmd_templates)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
