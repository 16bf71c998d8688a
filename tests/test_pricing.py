"""Tests for the model pricing lookup."""

import pytest

from llm_usage_tracker.utils.pricing import (
    DEFAULT_PRICING,
    MODEL_PRICING,
    cost_for,
    price_for,
)


class TestPriceFor:
    def test_exact_match(self):
        assert price_for("gpt-4o-mini") == MODEL_PRICING["gpt-4o-mini"]

    def test_prefix_match(self):
        assert price_for("gemini-1.5-pro-002") == MODEL_PRICING["gemini-1.5-pro"]

    def test_longest_key_wins(self):
        assert price_for("gpt-4o-mini-2024-07-18") == MODEL_PRICING["gpt-4o-mini"]
        assert price_for("gpt-4o-2024-11-20") == MODEL_PRICING["gpt-4o"]

    def test_substring_match(self):
        assert price_for("openai/o3-mini") == MODEL_PRICING["o3-mini"]

    @pytest.mark.parametrize("model,key", [
        ("claude-opus-4-6", "claude-3-opus-20240229"),
        ("claude-sonnet-4-5-20250929", "claude-3-5-sonnet-20241022"),
        ("claude-haiku-4-5", "claude-3-haiku-20240307"),
        ("gemini-2.5-pro", "gemini-2.0-flash"),
    ])
    def test_family_fallback(self, model, key):
        assert price_for(model) == MODEL_PRICING[key]

    def test_unknown_model_uses_default(self):
        assert price_for("some-local-llama") == DEFAULT_PRICING

    def test_missing_model_uses_default(self):
        assert price_for(None) == DEFAULT_PRICING
        assert price_for("") == DEFAULT_PRICING


class TestCostFor:
    def test_per_million(self):
        # gpt-4o: $2.50 in, $10.00 out
        assert cost_for(1_000_000, 1_000_000, "gpt-4o") == pytest.approx(12.5)

    def test_small_counts(self):
        expected = 35 / 1e6 * 3.0 + 15 / 1e6 * 15.0
        assert cost_for(35, 15, "claude-sonnet-4-20250514") == pytest.approx(expected)

    def test_zero_tokens(self):
        assert cost_for(0, 0, "gpt-4o") == 0.0
