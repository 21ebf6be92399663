"""
Tests for stylization.pricing

Test Coverage:
- calculate_token_cost(): per-model prices, explicit pricing, validation
- format_cost(): precision switch
- PricingCache: TTL refresh, failed refresh keeps cached prices
- summarize_usage(): album-level totals
"""
from datetime import datetime, timedelta, timezone

import pytest

from photobook_toolkit.core.models import AiUsage, Photo
from photobook_toolkit.stylization import (
    DEFAULT_MODEL_ID,
    ModelPricing,
    PricingCache,
    calculate_token_cost,
    format_cost,
    get_model,
    summarize_usage,
)


class TestTokenCost:
    def test_flash_model(self):
        cost = calculate_token_cost(1000, 1290, "gemini-2.5-flash-image")
        assert cost.input_cost == pytest.approx(0.00015)
        assert cost.output_cost == pytest.approx(0.0387)
        assert cost.total_cost == pytest.approx(0.03885)

    def test_pro_model(self):
        cost = calculate_token_cost(1000, 1120, "gemini-3-pro-image-preview")
        assert cost.total_cost == pytest.approx(0.002 + 0.1344)

    def test_no_model_priced_as_flash(self):
        assert calculate_token_cost(1000, 1290).total_cost == pytest.approx(0.03885)

    def test_explicit_pricing_wins(self):
        cost = calculate_token_cost(2_000_000, 0, "gemini-2.5-flash-image", pricing=ModelPricing(1.0, 10.0))
        assert cost.total_cost == pytest.approx(2.0)

    def test_negative_tokens_rejected(self):
        with pytest.raises(ValueError):
            calculate_token_cost(-1, 0)

    def test_unknown_model_falls_back(self):
        assert get_model("gpt-imaginary").id == DEFAULT_MODEL_ID


class TestFormatCost:
    @pytest.mark.parametrize("cost,expected", [
        (0.00005, "$0.000050"),
        (0.0001, "$0.0001"),
        (0.03886, "$0.0389"),
        (1.5, "$1.5000"),
    ])
    def test_precision(self, cost, expected):
        assert format_cost(cost) == expected


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 6, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


class TestPricingCache:
    def test_refreshes_once_per_ttl(self):
        # Arrange
        clock = FakeClock()
        calls = []

        def fetch():
            calls.append(clock.now)
            return ModelPricing(text_input=3.0, image_output=150.0)

        cache = PricingCache(fetch, clock=clock)

        # Act
        first = cache.get()
        clock.now += timedelta(hours=23)
        cache.get()
        clock.now += timedelta(hours=1)
        cache.get()

        # Assert
        assert first.image_output == 150.0
        assert len(calls) == 2
        assert cache.last_refreshed == clock.now

    def test_refresh_keeps_average_figures(self):
        cache = PricingCache(lambda: ModelPricing(3.0, 150.0), clock=FakeClock())
        pricing = cache.get()
        assert pricing.avg_image_tokens == get_model(DEFAULT_MODEL_ID).pricing.avg_image_tokens

    def test_failed_refresh_keeps_cached_prices(self, caplog):
        # Arrange
        def fetch():
            raise ConnectionError("pricing page unreachable")

        initial = ModelPricing(text_input=2.0, image_output=120.0)
        cache = PricingCache(fetch, initial=initial, clock=FakeClock())

        # Act
        pricing = cache.get()

        # Assert
        assert pricing == initial
        assert cache.last_refreshed is None
        assert cache.is_stale()
        assert "keeping cached values" in caplog.text

    def test_without_fetcher_never_refreshes(self):
        cache = PricingCache()
        assert cache.get() == get_model(DEFAULT_MODEL_ID).pricing
        assert cache.last_refreshed is None


class TestUsageSummary:
    def test_totals_skip_unstylized_photos(self):
        # Arrange
        photos = [
            Photo(id="a", preview="a.png", ai_usage=AiUsage("gemini-2.5-flash-image", prompt_tokens=1000,
                                                            output_tokens=1290, cost=0.03885)),
            Photo(id="b", preview="b.png"),
            Photo(id="c", preview="c.png", ai_usage=AiUsage("gemini-2.5-flash-image", prompt_tokens=1000,
                                                            output_tokens=1290, cost=0.03885)),
        ]

        # Act
        summary = summarize_usage(photos)

        # Assert
        assert summary.photo_count == 2
        assert summary.total_tokens == 4580
        assert summary.total_cost == pytest.approx(0.0777)
        assert summary.model_ids == ("gemini-2.5-flash-image",)
        assert summary.to_dict()["total_cost_display"] == "$0.0777"

    def test_empty(self):
        summary = summarize_usage([])
        assert summary.photo_count == 0
        assert summary.to_dict()["total_cost"] == 0
