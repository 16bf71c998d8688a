"""Model pricing lookup and cost calculation."""

from typing import NamedTuple


class ModelPricing(NamedTuple):
    input: float    # USD per 1M input tokens
    output: float   # USD per 1M output tokens


MODEL_PRICING: dict[str, ModelPricing] = {
    # Claude
    "claude-sonnet-4-20250514":   ModelPricing(3.00, 15.00),
    "claude-3-5-sonnet-20241022": ModelPricing(3.00, 15.00),
    "claude-3-5-sonnet-20240620": ModelPricing(3.00, 15.00),
    "claude-3-opus-20240229":     ModelPricing(15.00, 75.00),
    "claude-3-haiku-20240307":    ModelPricing(0.25, 1.25),
    "claude-opus-4-20250514":     ModelPricing(15.00, 75.00),
    # OpenAI
    "gpt-4o":                     ModelPricing(2.50, 10.00),
    "gpt-4o-mini":                ModelPricing(0.15, 0.60),
    "gpt-4-turbo":                ModelPricing(10.00, 30.00),
    "o1":                         ModelPricing(15.00, 60.00),
    "o1-mini":                    ModelPricing(1.10, 4.40),
    "o3-mini":                    ModelPricing(1.10, 4.40),
    # Gemini
    "gemini-2.0-flash":           ModelPricing(0.10, 0.40),
    "gemini-1.5-pro":             ModelPricing(1.25, 5.00),
    "gemini-1.5-flash":           ModelPricing(0.075, 0.30),
}

DEFAULT_PRICING = ModelPricing(3.00, 15.00)

_KEYS_LONGEST_FIRST = sorted(MODEL_PRICING, key=len, reverse=True)

# Checked in order; the mini marker must precede its flagship.
_FAMILY_FALLBACKS: list[tuple[str, str]] = [
    ("opus", "claude-3-opus-20240229"),
    ("sonnet", "claude-3-5-sonnet-20241022"),
    ("haiku", "claude-3-haiku-20240307"),
    ("gpt-4o-mini", "gpt-4o-mini"),
    ("gpt-4o", "gpt-4o"),
    ("gemini", "gemini-2.0-flash"),
]


def price_for(model: str | None) -> ModelPricing:
    """Resolve per-million pricing for a model identifier.

    Exact table match first, then the longest table key the model starts
    with or contains, then a family heuristic, then the default.
    """
    if not model:
        return DEFAULT_PRICING

    pricing = MODEL_PRICING.get(model)
    if pricing is not None:
        return pricing

    for key in _KEYS_LONGEST_FIRST:
        if model.startswith(key) or key in model:
            return MODEL_PRICING[key]

    for marker, key in _FAMILY_FALLBACKS:
        if marker in model:
            return MODEL_PRICING[key]

    return DEFAULT_PRICING


def cost_for(input_tokens: int, output_tokens: int, model: str | None) -> float:
    """Calculate cost in USD for the given token counts and model."""
    pricing = price_for(model)
    return (
        input_tokens / 1_000_000 * pricing.input
        + output_tokens / 1_000_000 * pricing.output
    )
