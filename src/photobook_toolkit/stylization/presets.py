"""
Module: stylization.presets

Purpose:
    Art-style presets and the instruction text sent with every
    stylization request.

Key Classes:
    - StylePreset: Named art style

Key Functions:
    - get_preset(): Look up a preset by id
    - build_instructions(): Full instruction text for one request
    - build_scene_instructions(): Instruction text for scene generation

Used By:
    - stylization.client: apply_stylization(), apply_scene()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


class PresetNotFoundError(KeyError):
    """Unknown style preset id."""
    pass


@dataclass(frozen=True)
class StylePreset:
    id: str
    name: str
    prompt: str


COMIC_BOOK = StylePreset(
    id="comic-book",
    name="Comic Book",
    prompt=(
        "Transform this entire image into vibrant comic book style illustration. "
        "Use bold, crisp black outlines with saturated flat colors and cel-shading. "
        "Create dynamic lighting with strong contrast between light and shadow areas. "
        "Make characters and objects look like they are from a classic American "
        "comic book panel."
    ),
)

MANGA = StylePreset(
    id="manga",
    name="Manga",
    prompt=(
        "Transform this entire image into Japanese manga illustration style. "
        "Convert to high-contrast black and white with expressive hatching and "
        "cross-hatching for shading. Use bold black outlines with varying line "
        "weights: thick for main contours, thin for details. Add dramatic lighting "
        "with deep shadows and crisp white highlights. If there are faces, make eyes "
        "larger and more expressive in classic manga style."
    ),
)

NOIR = StylePreset(
    id="noir",
    name="Noir",
    prompt=(
        "Transform this entire image into a noir comic book illustration style. "
        "Convert to dramatic black and white with high-contrast lighting: deep "
        "blacks, crisp whites, and minimal mid-tones. Use bold silhouettes and "
        "dramatic shadow patterns inspired by 1940s noir film posters. Create a "
        "moody, atmospheric mood with strong diagonal lighting and expressive "
        "brushwork for outlines."
    ),
)

WATERCOLOR = StylePreset(
    id="watercolor",
    name="Watercolor",
    prompt=(
        "Transform this entire image into a watercolor painting illustration. "
        "Use transparent color washes with soft, flowing edges where colors blend "
        "naturally into each other. Paper texture should be subtly visible, "
        "especially in lighter areas. Colors should be vibrant but with the "
        "characteristic translucency of watercolor medium. Use wet-on-wet blending "
        "for dreamy, soft transitions. Bold outlines can define key shapes while "
        "fill areas have soft watercolor treatment."
    ),
)

ANIMATED_3D = StylePreset(
    id="3d-animated",
    name="3D Animated",
    prompt=(
        "Transform this entire image into a 3D animated movie character "
        "illustration style, similar to Pixar and DreamWorks films. Create smooth, "
        "rounded forms with soft expressive lighting and subtle subsurface "
        "scattering on skin. Use vibrant, appealing colors with gentle diffused "
        "shadows. Characters should have exaggerated charming proportions: large "
        "expressive eyes, smooth skin textures. The overall feel should be warm, "
        "friendly, and visually polished like a frame from a modern 3D animated film."
    ),
)

STYLE_PRESETS: Dict[str, StylePreset] = {
    p.id: p for p in (COMIC_BOOK, MANGA, NOIR, WATERCOLOR, ANIMATED_3D)
}

DEFAULT_PRESET_ID = COMIC_BOOK.id

DEFAULT_PROCESS_INSTRUCTIONS = """\
CRITICAL RULE: The output MUST be fully rendered in the chosen art style. It must look like stylized artwork, NOT a photograph. The style preset defines the target visual appearance and must be applied completely to every part of the image. At the same time, copy every person and detail from the source exactly as visible: same poses, same body orientations, same states. The art style changes how things are rendered; it does not change what is shown. Do NOT add or remove any objects, accessories, or clothing items (e.g. do not add glasses, hats, or change what someone is wearing). The style preset may adjust rendering proportions (e.g. larger eyes in manga style) as part of the art style. Only the rendering style (lines, colors, shading, proportions) should change, not what is depicted.

IMPORTANT INSTRUCTIONS:
1. ANALYZE the small fragment of background visible in the source photo (e.g., sky, clouds, trees, ground, water, buildings, sunset).
2. EXTEND this EXACT SAME environment to fill the white areas. Create a wide panoramic view of this location.
3. The white areas are NOT part of the scene - they are blank canvas to paint the extended background on.
4. Keep the original photo content in its EXACT position - do not move, resize, or recompose it.
5. Maintain spatial composition: if the photo is positioned upper-left, keep content there and extend the scene to right and bottom.
6. Match the perspective, lighting, and elements from the visible background.
7. The photo MUST MERGE seamlessly with the extended background - there should be NO separation, NO dividing lines, NO borders between the photo and the extended areas. The background from the photo should continue all the way to the outer edges of the canvas.
8. The source photo is the single source of truth for all content. Every visible element (pose, orientation, clothing, accessories, expressions) must match the source exactly. Render only what is visible; anything hidden or not shown in the source must stay that way. The art style may adjust proportions and eye size as part of the style, but must not change what is depicted or invent details not present in the source.
9. CRITICAL: Fill the ENTIRE canvas edge-to-edge with the scene. NO white bars, NO blank spaces, NO padding at top, bottom, left, or right. The artwork must extend all the way to every edge of the image.
10. If the original aspect ratio needs adjustment, extend the background scenery rather than adding white/blank bars.

Transform and extend seamlessly in the chosen art style. The result must look like one unified scene of stylized artwork, not a photo placed on a background."""

EXPANSION_INSTRUCTIONS = """\
EXPANSION MODE: The photo has been shrunk onto a larger white canvas. The white margin around it is empty space to be filled: paint the surrounding scene into it so the final image covers the whole canvas at its exact size and aspect ratio."""


MAX_SCENE_REFERENCES = 3

SCENE_GENERATION_INSTRUCTIONS = """\
Extract all the people from this reference photo: their exact faces, clothing, body types, and poses. Place them naturally in this new scene: {scene}

CRITICAL RULES:
1. Preserve every person's exact appearance from the reference photo: same faces, clothing, body type
2. Generate a completely new background based on the scene description
3. Integrate the people naturally into the new scene with correct lighting and perspective
4. Apply the art style described above to the entire image
5. Fill the ENTIRE canvas edge-to-edge with no white bars and no blank spaces
6. The result must be one unified stylized illustration of these people in the described scene"""


def get_preset(preset_id: str) -> StylePreset:
    """
    Look up a style preset.

    Raises:
        PresetNotFoundError: If the id is unknown
    """
    try:
        return STYLE_PRESETS[preset_id]
    except KeyError:
        raise PresetNotFoundError(preset_id) from None


def build_instructions(
    preset_id: Optional[str] = None,
    *,
    expansion: bool = False,
    extra: Optional[str] = None,
) -> str:
    """
    Assemble the instruction text for one stylization request.

    The preset prompt comes first, then the processing rules; expansion
    mode and free-form user edits are appended at the end.

    Example:
        >>> text = build_instructions("noir", expansion=True)
        >>> text.startswith("Transform this entire image into a noir")
        True
    """
    preset = get_preset(preset_id or DEFAULT_PRESET_ID)
    parts = [preset.prompt, DEFAULT_PROCESS_INSTRUCTIONS]
    if expansion:
        parts.append(EXPANSION_INSTRUCTIONS)
    if extra:
        parts.append(extra.strip())
    return "\n\n".join(parts)


def build_scene_instructions(
    scene_description: str,
    preset_id: Optional[str] = None,
    *,
    reference_count: int = 1,
) -> str:
    """
    Instruction text for generating a new scene around reference people.

    The preset prompt comes first, then the scene rules with the
    description filled in. With several references a lead-in tells the
    provider how many photos precede the text.

    Raises:
        ValueError: If the description is blank or the reference count
            is outside 1..MAX_SCENE_REFERENCES
        PresetNotFoundError: If the preset id is unknown
    """
    description = (scene_description or "").strip()
    if not description:
        raise ValueError("Scene description is required")
    if not 1 <= reference_count <= MAX_SCENE_REFERENCES:
        raise ValueError(
            f"Scene generation takes 1 to {MAX_SCENE_REFERENCES} reference photos, "
            f"got {reference_count}"
        )

    preset = get_preset(preset_id or DEFAULT_PRESET_ID)
    text = preset.prompt + "\n\n" + SCENE_GENERATION_INSTRUCTIONS.format(scene=description)
    if reference_count > 1:
        text = (
            f"Reference photos above show the people to use ({reference_count} photos). " + text
        )
    return text
