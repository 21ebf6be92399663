"""
Module: album

Purpose:
    Album data consumed read-only by the print pipeline: photos, speech
    bubbles, spreads, cover, and the album itself. Field names in
    to_dict()/from_dict() follow the editor's camelCase JSON snapshot.

Key Classes:
    - BubbleType, TailDirection: Bubble variants
    - AiUsage: Record of a stylization call
    - Photo: Preview/original image pair with crop and caption
    - SpeechBubble: Text annotation anchored in spread percentages
    - Spread, Cover, Album

Dependencies:
    - .geometry: CropArea, PercentPoint

Used By:
    - core.utils.serialization
    - builder.layout.composer
    - builder.bubbles
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional, Tuple

from .geometry import CropArea, PercentPoint
from .slots import PageSide


class BubbleType(str, Enum):
    """Bubble variant; each has its own outline generator."""

    SPEECH = "speech"
    THOUGHT = "thought"
    ANNOTATION = "annotation"
    TEXT_BLOCK = "text-block"


class TailDirection(str, Enum):
    """Diagonal corner a speech tail (or thought trail) points toward."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_top(self) -> bool:
        return self.value.startswith("top")

    @property
    def is_left(self) -> bool:
        return self.value.endswith("left")


@dataclass(frozen=True)
class AiUsage:
    """Token usage and cost of one stylization call."""

    model_id: str
    preset_id: Optional[str] = None
    prompt_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0

    def to_dict(self) -> dict:
        d = {
            "modelId": self.model_id,
            "promptTokens": self.prompt_tokens,
            "candidatesTokens": self.output_tokens,
            "cost": self.cost,
        }
        if self.preset_id:
            d["presetId"] = self.preset_id
        return d

    @classmethod
    def from_dict(cls, data: dict) -> AiUsage:
        return cls(
            model_id=data["modelId"],
            preset_id=data.get("presetId"),
            prompt_tokens=int(data.get("promptTokens", 0)),
            output_tokens=int(data.get("candidatesTokens", 0)),
            cost=float(data.get("cost", 0.0)),
        )


@dataclass(frozen=True)
class Photo:
    """
    A photo placed in a slot.

    Attributes:
        id: Photo identifier
        preview: Working-resolution image (data URI or file path). After
            stylization this holds the stylized result.
        original: Optional full-resolution image used only for print
        crop_area: Crop in the original image's pixel space
        visible: Hidden photos are not printed
        caption: Optional caption text
        ai_usage: Present once the photo has been stylized
        is_stylizing: A stylization call is in flight
        zoom: Crop zoom; below 1 means expansion mode
    """

    id: str
    preview: str
    original: Optional[str] = None
    crop_area: Optional[CropArea] = None
    visible: bool = True
    caption: Optional[str] = None
    ai_usage: Optional[AiUsage] = None
    is_stylizing: bool = False
    zoom: float = 1.0

    @property
    def has_image(self) -> bool:
        return bool(self.preview)

    @property
    def is_stylized(self) -> bool:
        return self.ai_usage is not None

    @property
    def is_expansion(self) -> bool:
        return self.zoom < 1.0

    def to_dict(self) -> dict:
        d: dict = {"id": self.id, "url": self.preview}
        if self.original:
            d["originalUrl"] = self.original
        if self.crop_area is not None:
            d["cropArea"] = self.crop_area.to_dict()
        if not self.visible:
            d["visible"] = False
        if self.caption:
            d["caption"] = self.caption
        if self.ai_usage is not None:
            d["aiUsage"] = self.ai_usage.to_dict()
        if self.is_stylizing:
            d["isStylizing"] = True
        if self.zoom != 1.0:
            d["zoom"] = self.zoom
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Photo:
        return cls(
            id=data["id"],
            preview=data.get("url") or "",
            original=data.get("originalUrl") or None,
            crop_area=CropArea.from_dict(data["cropArea"]) if data.get("cropArea") else None,
            visible=data.get("visible", True),
            caption=data.get("caption") or None,
            ai_usage=AiUsage.from_dict(data["aiUsage"]) if data.get("aiUsage") else None,
            is_stylizing=data.get("isStylizing", False),
            zoom=float(data.get("zoom", 1.0)),
        )


@dataclass(frozen=True)
class SpeechBubble:
    """
    Comic-style text annotation owned by a spread.

    The anchor is a percentage of the whole spread (both pages), so a
    bubble survives replacing the photo under it.

    Attributes:
        id: Bubble identifier
        anchor: Centre of the bubble in spread percentages
        text: Free text; newlines force line breaks
        type: Bubble variant
        tail_direction: Corner the tail points toward
        width, height: Explicit size overrides in editor pixels
        font_size: Explicit font size in editor pixels
        scale: Uniform user scale (0.3 - 3)
    """

    id: str
    anchor: PercentPoint
    text: str
    type: BubbleType = BubbleType.SPEECH
    tail_direction: TailDirection = TailDirection.BOTTOM_LEFT
    width: Optional[float] = None
    height: Optional[float] = None
    font_size: Optional[float] = None
    scale: float = 1.0

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "x": self.anchor.x,
            "y": self.anchor.y,
            "text": self.text,
            "type": self.type.value,
            "tailDirection": self.tail_direction.value,
        }
        if self.width is not None:
            d["width"] = self.width
        if self.height is not None:
            d["height"] = self.height
        if self.font_size is not None:
            d["fontSize"] = self.font_size
        if self.scale != 1.0:
            d["scale"] = self.scale
        return d

    @classmethod
    def from_dict(cls, data: dict) -> SpeechBubble:
        return cls(
            id=data["id"],
            anchor=PercentPoint(float(data["x"]), float(data["y"])),
            text=data.get("text", ""),
            type=BubbleType(data.get("type") or "speech"),
            tail_direction=TailDirection(data.get("tailDirection") or "bottom-left"),
            width=data.get("width"),
            height=data.get("height"),
            font_size=data.get("fontSize"),
            scale=float(data.get("scale", 1.0)),
        )


def _photo_or_none(data: Optional[dict]) -> Optional[Photo]:
    if not data:
        return None
    return Photo.from_dict(data)


@dataclass(frozen=True)
class Spread:
    """
    One left + right page pair.

    Photo lists are indexed by slot; ``None`` marks an empty slot.
    """

    id: str
    template_id: str
    left_photos: Tuple[Optional[Photo], ...] = ()
    right_photos: Tuple[Optional[Photo], ...] = ()
    bubbles: Tuple[SpeechBubble, ...] = ()

    def photos(self, side: PageSide) -> Tuple[Optional[Photo], ...]:
        return self.left_photos if side is PageSide.LEFT else self.right_photos

    def photo_at(self, side: PageSide, index: int) -> Optional[Photo]:
        """Photo in a slot, or None if the slot is empty or out of range."""
        photos = self.photos(side)
        if index >= len(photos):
            return None
        return photos[index]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "templateId": self.template_id,
            "leftPhotos": [p.to_dict() if p else None for p in self.left_photos],
            "rightPhotos": [p.to_dict() if p else None for p in self.right_photos],
            "bubbles": [b.to_dict() for b in self.bubbles],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Spread:
        return cls(
            id=data["id"],
            template_id=data["templateId"],
            left_photos=tuple(_photo_or_none(p) for p in data.get("leftPhotos", [])),
            right_photos=tuple(_photo_or_none(p) for p in data.get("rightPhotos", [])),
            bubbles=tuple(SpeechBubble.from_dict(b) for b in data.get("bubbles", [])),
        )


@dataclass(frozen=True)
class Cover:
    """Front/back cover images and optional title."""

    front: Optional[Photo] = None
    back: Optional[Photo] = None
    title: Optional[str] = None

    @property
    def has_images(self) -> bool:
        return any(p is not None and p.has_image for p in (self.front, self.back))

    def to_dict(self) -> dict:
        d = {
            "frontImage": self.front.to_dict() if self.front else None,
            "backImage": self.back.to_dict() if self.back else None,
        }
        if self.title:
            d["title"] = self.title
        return d

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Cover:
        if not data:
            return cls()
        return cls(
            front=_photo_or_none(data.get("frontImage")),
            back=_photo_or_none(data.get("backImage")),
            title=data.get("title") or None,
        )


@dataclass(frozen=True)
class Album:
    """
    Complete album (immutable snapshot).

    Attributes:
        id: Album identifier
        title: Album title
        cover: Cover images and title
        spreads: Spreads in print order
        with_gaps: Keep inter-slot margins for every spread
        created_at, updated_at: Timestamps
    """

    id: str
    title: str
    cover: Cover = field(default_factory=Cover)
    spreads: Tuple[Spread, ...] = ()
    with_gaps: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def iter_photos(self) -> Iterator[Photo]:
        """Cover photos, then every spread photo in album order."""
        for photo in (self.cover.front, self.cover.back):
            if photo is not None:
                yield photo
        for spread in self.spreads:
            for photo in spread.left_photos + spread.right_photos:
                if photo is not None:
                    yield photo

    @property
    def photo_count(self) -> int:
        """Number of populated photo slots across all spreads."""
        return sum(
            1
            for spread in self.spreads
            for photo in spread.left_photos + spread.right_photos
            if photo is not None and photo.has_image
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "cover": self.cover.to_dict(),
            "spreads": [s.to_dict() for s in self.spreads],
            "withGaps": self.with_gaps,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Album:
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            cover=Cover.from_dict(data.get("cover")),
            spreads=tuple(Spread.from_dict(s) for s in data.get("spreads", [])),
            with_gaps=data.get("withGaps", True),
            created_at=_parse_date(data.get("createdAt")),
            updated_at=_parse_date(data.get("updatedAt")),
        )


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date as written by JavaScript's toISOString()."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
