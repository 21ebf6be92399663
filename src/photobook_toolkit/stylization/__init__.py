"""
Module: stylization

Purpose:
    Seam to external image-stylization providers: style presets,
    request preparation with unstylized fallback, and model pricing.

Key Functions:
    - apply_stylization(): Stylize one photo through a provider
    - apply_scene(): New scene photo from reference photos
    - calculate_token_cost(): Cost of one call
    - summarize_usage(): Album-level AI usage totals

Used By:
    - Host applications
"""

from .client import (
    SceneOutcome,
    StylizationError,
    StylizationOutcome,
    Stylizer,
    StylizerResponse,
    apply_scene,
    apply_stylization,
    build_expansion_canvas,
)
from .presets import (
    DEFAULT_PRESET_ID,
    DEFAULT_PROCESS_INSTRUCTIONS,
    EXPANSION_INSTRUCTIONS,
    MAX_SCENE_REFERENCES,
    SCENE_GENERATION_INSTRUCTIONS,
    STYLE_PRESETS,
    PresetNotFoundError,
    StylePreset,
    build_instructions,
    build_scene_instructions,
    get_preset,
)
from .pricing import (
    DEFAULT_MODEL_ID,
    STYLIZATION_MODELS,
    ModelPricing,
    PricingCache,
    StylizationModel,
    TokenCost,
    UsageSummary,
    calculate_token_cost,
    format_cost,
    get_model,
    summarize_usage,
)

__all__ = [
    # Client
    "SceneOutcome",
    "StylizationError",
    "StylizationOutcome",
    "Stylizer",
    "StylizerResponse",
    "apply_scene",
    "apply_stylization",
    "build_expansion_canvas",
    # Presets
    "DEFAULT_PRESET_ID",
    "DEFAULT_PROCESS_INSTRUCTIONS",
    "EXPANSION_INSTRUCTIONS",
    "MAX_SCENE_REFERENCES",
    "SCENE_GENERATION_INSTRUCTIONS",
    "STYLE_PRESETS",
    "PresetNotFoundError",
    "StylePreset",
    "build_instructions",
    "build_scene_instructions",
    "get_preset",
    # Pricing
    "DEFAULT_MODEL_ID",
    "STYLIZATION_MODELS",
    "ModelPricing",
    "PricingCache",
    "StylizationModel",
    "TokenCost",
    "UsageSummary",
    "calculate_token_cost",
    "format_cost",
    "get_model",
    "summarize_usage",
]
