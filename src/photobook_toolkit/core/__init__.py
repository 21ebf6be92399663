"""
Photobook Toolkit Core Package

Shared data models, snapshot validation and serialization for the print
pipeline. Everything here is pure data: no image decoding and no PDF
writing happen in this package.

**DESIGN NOTES:**

1. **Immutable Data Models**
   - Frozen dataclasses; edits produce new instances

2. **Explicit Coordinate Spaces**
   - Normalized slot space, pixel crop space, spread percentages and
     physical millimetres are separate types with named conversions

3. **Snapshot Compatibility**
   - to_dict()/from_dict() read and write the editor's camelCase JSON
"""

from .models import (
    Album,
    CropArea,
    MmRect,
    NormRect,
    PercentPoint,
    Photo,
    PhotoSlot,
    SpeechBubble,
    Spread,
    SpreadTemplate,
)

__all__ = [
    "Album",
    "CropArea",
    "MmRect",
    "NormRect",
    "PercentPoint",
    "Photo",
    "PhotoSlot",
    "SpeechBubble",
    "Spread",
    "SpreadTemplate",
]
