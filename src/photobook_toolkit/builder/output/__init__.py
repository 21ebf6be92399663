"""
Module: builder.output

Purpose:
    PDF rendering and caption strips.
    Converts LayoutResult to PDF files using ReportLab.

Key Functions:
    - render_to_pdf(): Render layout to PDF
    - render_caption(): Caption strip bitmap

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling

Used By:
    - builder.controller: Pipeline orchestration
    - builder.layout.composer: Captions
"""

from .caption import caption_rect, render_caption
from .renderer import render_to_pdf

__all__ = [
    "caption_rect",
    "render_caption",
    "render_to_pdf",
]
