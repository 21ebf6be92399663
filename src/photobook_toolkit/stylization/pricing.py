"""
Module: stylization.pricing

Purpose:
    Model catalogue with per-token prices, cost calculation for a
    stylization call, and a process-wide pricing cache refreshed at most
    once per TTL.

Key Classes:
    - ModelPricing, StylizationModel: Catalogue entries
    - TokenCost: Cost breakdown of one call
    - PricingCache: Refreshable price table with explicit TTL
    - UsageSummary: Token and cost totals over many photos

Key Functions:
    - get_model(): Catalogue lookup with default fallback
    - calculate_token_cost(): Cost of one call
    - format_cost(): Dollar string for display
    - summarize_usage(): Album-level token and cost totals

Used By:
    - stylization.client: AiUsage cost
    - builder.controller: Usage totals in build metadata
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from photobook_toolkit.core.models import Photo

logger = logging.getLogger(__name__)

TOKENS_PER_UNIT = 1_000_000
CACHE_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class ModelPricing:
    """
    Attributes:
        text_input: $ per 1M prompt tokens
        image_output: $ per 1M output tokens
        avg_image_tokens: Typical output tokens per image
        avg_image_cost: Typical $ per image
    """

    text_input: float
    image_output: float
    avg_image_tokens: int = 0
    avg_image_cost: float = 0.0


@dataclass(frozen=True)
class StylizationModel:
    id: str
    name: str
    description: str
    pricing: ModelPricing


STYLIZATION_MODELS: Dict[str, StylizationModel] = {
    "gemini-2.5-flash-image": StylizationModel(
        id="gemini-2.5-flash-image",
        name="Gemini 2.5 Flash Image",
        description="Fast, inexpensive model; good for tests",
        pricing=ModelPricing(
            text_input=0.15,
            image_output=30.00,
            avg_image_tokens=1290,
            avg_image_cost=0.039,
        ),
    ),
    "gemini-3-pro-image-preview": StylizationModel(
        id="gemini-3-pro-image-preview",
        name="Gemini 3 Pro Image Preview",
        description="Higher quality model, about 3.4x the price",
        pricing=ModelPricing(
            text_input=2.00,
            image_output=120.00,
            avg_image_tokens=1120,
            avg_image_cost=0.134,
        ),
    ),
}

DEFAULT_MODEL_ID = "gemini-3-pro-image-preview"
COST_MODEL_ID = "gemini-2.5-flash-image"


@dataclass(frozen=True)
class TokenCost:
    input_cost: float
    output_cost: float

    @property
    def total_cost(self) -> float:
        return self.input_cost + self.output_cost


def get_model(model_id: Optional[str]) -> StylizationModel:
    """Catalogue entry for ``model_id``; unknown ids fall back to the default model."""
    model = STYLIZATION_MODELS.get(model_id or "")
    if model is None:
        if model_id:
            logger.debug(f"Unknown model {model_id!r}, using {DEFAULT_MODEL_ID}")
        model = STYLIZATION_MODELS[DEFAULT_MODEL_ID]
    return model


def calculate_token_cost(
    prompt_tokens: int,
    output_tokens: int,
    model_id: Optional[str] = None,
    *,
    pricing: Optional[ModelPricing] = None,
) -> TokenCost:
    """
    Dollar cost of one stylization call.

    Args:
        prompt_tokens: Input tokens (text + input image)
        output_tokens: Output (image) tokens
        model_id: Catalogue model; None prices as the flash model
        pricing: Explicit prices, e.g. from PricingCache (overrides model_id)

    Example:
        >>> round(calculate_token_cost(1000, 1290, "gemini-2.5-flash-image").total_cost, 5)
        0.03885
    """
    if prompt_tokens < 0 or output_tokens < 0:
        raise ValueError("Token counts must be non-negative")
    if pricing is None:
        pricing = get_model(model_id or COST_MODEL_ID).pricing
    return TokenCost(
        input_cost=prompt_tokens * (pricing.text_input / TOKENS_PER_UNIT),
        output_cost=output_tokens * (pricing.image_output / TOKENS_PER_UNIT),
    )


def format_cost(cost: float) -> str:
    """Dollar string; 6 decimals below $0.0001, else 4."""
    if cost < 0.0001:
        return f"${cost:.6f}"
    return f"${cost:.4f}"


@dataclass(frozen=True)
class UsageSummary:
    """
    Token and cost totals over a set of stylized photos.

    Attributes:
        photo_count: Photos with recorded usage
        prompt_tokens: Total input tokens
        output_tokens: Total output tokens
        total_cost: Sum of the per-call costs recorded at stylization time
        model_ids: Distinct models used, in first-seen order
    """

    photo_count: int = 0
    prompt_tokens: int = 0
    output_tokens: int = 0
    total_cost: float = 0.0
    model_ids: Tuple[str, ...] = ()

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.output_tokens

    def to_dict(self) -> dict:
        return {
            "photo_count": self.photo_count,
            "prompt_tokens": self.prompt_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
            "total_cost": round(self.total_cost, 6),
            "total_cost_display": format_cost(self.total_cost),
            "model_ids": list(self.model_ids),
        }


def summarize_usage(photos: Iterable[Photo]) -> UsageSummary:
    """
    Album-level AI usage: totals over every photo carrying an AiUsage record.

    Photos without usage (never stylized, or stylization failed) are ignored.

    Example:
        >>> summarize_usage(album.iter_photos()).total_cost
        0.0777
    """
    count = prompt = output = 0
    cost = 0.0
    models: List[str] = []
    for photo in photos:
        usage = photo.ai_usage
        if usage is None:
            continue
        count += 1
        prompt += usage.prompt_tokens
        output += usage.output_tokens
        cost += usage.cost
        if usage.model_id not in models:
            models.append(usage.model_id)
    return UsageSummary(count, prompt, output, cost, tuple(models))


class PricingCache:
    """
    Process-wide price table with an explicit refresh timestamp.

    ``fetcher`` returns fresh pricing (or raises); it is called at most
    once per TTL. When it fails the last known prices are kept and the
    next call tries again.

    Example:
        >>> cache = PricingCache(fetcher=fetch_published_prices)
        >>> cache.get().image_output
        120.0
    """

    def __init__(
        self,
        fetcher: Optional[Callable[[], ModelPricing]] = None,
        *,
        initial: Optional[ModelPricing] = None,
        ttl: timedelta = CACHE_TTL,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._fetcher = fetcher
        self._pricing = initial or STYLIZATION_MODELS[DEFAULT_MODEL_ID].pricing
        self._ttl = ttl
        self._clock = clock
        self._last_refreshed: Optional[datetime] = None
        self._lock = threading.Lock()

    @property
    def last_refreshed(self) -> Optional[datetime]:
        return self._last_refreshed

    def is_stale(self) -> bool:
        if self._last_refreshed is None:
            return True
        return self._clock() - self._last_refreshed >= self._ttl

    def get(self) -> ModelPricing:
        """Current prices, refreshing first when the cache is stale."""
        with self._lock:
            if self._fetcher is not None and self.is_stale():
                self._refresh()
            return self._pricing

    def _refresh(self) -> None:
        try:
            fetched = self._fetcher()
        except Exception as e:
            logger.warning(f"Failed to refresh pricing, keeping cached values: {e}")
            return
        self._pricing = replace(
            self._pricing,
            text_input=fetched.text_input,
            image_output=fetched.image_output,
        )
        self._last_refreshed = self._clock()
        logger.info(
            f"Updated pricing: input ${fetched.text_input}/1M, "
            f"output ${fetched.image_output}/1M"
        )
