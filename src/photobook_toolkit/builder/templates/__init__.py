"""
Module: builder.templates

Purpose:
    Spread template catalog and effective slot geometry.

Key Functions:
    - get_template(), find_template(): Catalog lookup
    - get_page_slots(): Effective slots for a page and gap setting

Used By:
    - builder.layout.composer
"""

from .catalog import (
    GAP_MARGIN,
    SPREAD_TEMPLATES,
    TemplateNotFoundError,
    find_template,
    get_page_slots,
    get_template,
    panorama_aspect_ratio,
    remove_gaps,
    slot_aspect_ratio,
)

__all__ = [
    "GAP_MARGIN",
    "SPREAD_TEMPLATES",
    "TemplateNotFoundError",
    "find_template",
    "get_page_slots",
    "get_template",
    "panorama_aspect_ratio",
    "remove_gaps",
    "slot_aspect_ratio",
]
