"""
Module: builder.output.renderer

Purpose:
    Render LayoutResult to PDF using ReportLab.
    Each PagePlan becomes one PDF page with its own physical size;
    bitmaps are placed at their millimetre rectangles.

Key Functions:
    - render_to_pdf(): Main rendering function

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - builder.layout.models: LayoutResult, PagePlan

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from photobook_toolkit.builder.layout.models import LayoutResult, PagePlan, PhotoPlacement
from photobook_toolkit.core.models import MmRect, mm_to_pt

logger = logging.getLogger(__name__)

TITLE_FONT = "Helvetica-Bold"
JPEG_QUALITY = 95

# Page size used when the layout has no pages at all
EMPTY_PAGE_SIZE_MM = (206.0, 206.0)


def render_to_pdf(layout: LayoutResult, output_path: Path, *, title: str = "") -> None:
    """
    Render layout result to PDF file.

    Args:
        layout: Composed pages
        output_path: Path to write PDF
        title: Document title metadata

    Raises:
        OSError: If the PDF cannot be written

    Example:
        >>> render_to_pdf(layout, Path("output/album.pdf"))
    """
    if layout.page_count == 0:
        logger.warning("Empty layout, creating empty PDF")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    first_size = (
        (layout.pages[0].width_mm, layout.pages[0].height_mm)
        if layout.pages else EMPTY_PAGE_SIZE_MM
    )
    c = canvas.Canvas(str(output_path), pagesize=_page_size_pt(*first_size))
    if title:
        c.setTitle(title)

    for page in layout.pages:
        c.setPageSize(_page_size_pt(page.width_mm, page.height_mm))
        _render_page(c, page)
        c.showPage()

    c.save()

    logger.info(f"Rendered {layout.page_count} pages to {output_path}")


def _page_size_pt(width_mm: float, height_mm: float) -> tuple[float, float]:
    return (mm_to_pt(width_mm), mm_to_pt(height_mm))


def _render_page(c: canvas.Canvas, page: PagePlan) -> None:
    """
    Draw one page. Order: photos, borders, captions, bubbles, title.

    Args:
        c: ReportLab canvas
        page: Page plan with placements
    """
    for photo in page.photos:
        _draw_image(c, photo.image, photo.rect, page.height_mm)
        if photo.border_mm > 0:
            _draw_border(c, photo, page.height_mm)

    for caption in page.captions:
        _draw_image(c, caption.image, caption.rect, page.height_mm)

    for bubble in page.bubbles:
        _draw_image(c, bubble.image, bubble.rect, page.height_mm)

    if page.title is not None:
        _draw_title(c, page)


def _draw_image(c: canvas.Canvas, image: Image.Image, rect: MmRect, sheet_height_mm: float) -> None:
    x_pt, y_pt, width_pt, height_pt = rect.to_points(sheet_height_mm)
    has_alpha = image.mode in ("RGBA", "LA")
    c.drawImage(
        _pil_to_reader(image),
        x_pt,
        y_pt,
        width=width_pt,
        height=height_pt,
        mask="auto" if has_alpha else None,
    )


def _draw_border(c: canvas.Canvas, photo: PhotoPlacement, sheet_height_mm: float) -> None:
    """White stroke fully inside the slot edges."""
    half = photo.border_mm / 2
    x_pt, y_pt, width_pt, height_pt = photo.slot_rect.inset(half).to_points(sheet_height_mm)

    c.saveState()
    c.setStrokeColorRGB(1, 1, 1)
    c.setLineWidth(mm_to_pt(photo.border_mm))
    c.rect(x_pt, y_pt, width_pt, height_pt, stroke=1, fill=0)
    c.restoreState()


def _draw_title(c: canvas.Canvas, page: PagePlan) -> None:
    """Bold title centred on its point, vertically centred on the cap height."""
    title = page.title
    size = title.font_size_pt
    x_pt = mm_to_pt(title.x)
    y_pt = mm_to_pt(page.height_mm - title.y) - size * 0.35

    c.saveState()
    c.setFont(TITLE_FONT, size)
    c.setFillColorRGB(0, 0, 0)
    c.drawCentredString(x_pt, y_pt, title.text)
    c.restoreState()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Opaque bitmaps are embedded as JPEG, transparent ones as PNG.
    """
    buf = io.BytesIO()
    if img.mode in ("RGBA", "LA"):
        img.save(buf, format="PNG")
    else:
        img.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY)
    buf.seek(0)
    return ImageReader(buf)
