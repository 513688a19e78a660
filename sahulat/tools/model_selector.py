"""Model tier resolution with a static fallback chain."""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from sahulat.errors import SahulatError
from sahulat.tools.openrouter_client import CATALOG_TIMEOUT, DEFAULT_BASE_URL, fetch_available_models

logger = logging.getLogger(__name__)


class ModelTier(str, Enum):
    """Capability classes requested from the completion service."""

    CHAT = "chat"  # general conversation
    FAST = "fast"  # short answers, low latency
    CREATIVE = "creative"
    SMART = "smart"  # reasoning-heavy
    PROGRAMMING = "programming"  # structured output


TIER_MODELS: Mapping[ModelTier, str] = MappingProxyType({
    ModelTier.CHAT: "meta-llama/llama-3.1-8b-instruct",
    ModelTier.FAST: "microsoft/phi-3-mini-4k-instruct",
    ModelTier.CREATIVE: "google/gemini-flash-1.5",
    ModelTier.SMART: "anthropic/claude-3-haiku",
    ModelTier.PROGRAMMING: "microsoft/phi-3-mini-4k-instruct",
})

# Scanned in order when the preferred model is unavailable
FALLBACK_MODELS: tuple[str, ...] = (
    "meta-llama/llama-3.1-8b-instruct",
    "anthropic/claude-3-haiku",
    "google/gemini-flash-1.5",
    "microsoft/phi-3-mini-4k-instruct",
)

DEFAULT_MODEL = "meta-llama/llama-3.1-8b-instruct"


def get_tier_from_string(tier: str | ModelTier) -> ModelTier | None:
    """Accept an enum, a value ("fast") or a name ("FAST")."""
    if isinstance(tier, ModelTier):
        return tier
    try:
        return ModelTier(str(tier).strip().lower())
    except ValueError:
        return None


def resolve_model(
    requested_tier: str | ModelTier,
    api_key: str | None,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = CATALOG_TIMEOUT,
) -> str:
    """Resolve a tier to a concrete model identifier. Never raises."""
    tier = get_tier_from_string(requested_tier)
    preferred = TIER_MODELS.get(tier) if tier else None
    if preferred is None:
        logger.warning("Unknown model tier %r - scanning fallback models", requested_tier)

    try:
        available = fetch_available_models(api_key, base_url=base_url, timeout=timeout)
    except SahulatError as e:
        logger.warning("Model catalog unavailable (%s) - using %s", e, FALLBACK_MODELS[0])
        return FALLBACK_MODELS[0]

    if preferred and preferred in available:
        return preferred

    for model in FALLBACK_MODELS:
        if model in available:
            logger.info("Using fallback model %s instead of %s", model, preferred)
            return model

    logger.info("No known model in catalog - using default %s", DEFAULT_MODEL)
    return DEFAULT_MODEL
