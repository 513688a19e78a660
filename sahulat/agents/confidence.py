"""Confidence scoring and missing-field prompts for parsed attributes."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from sahulat.agents.extraction_rules import rules_for
from sahulat.models.profile import ParsedAttributes

# Weighted fields; weights sum to 1.0 but only present fields contribute
FIELD_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "age": 0.15,
    "gender": 0.10,
    "education": 0.15,
    "location": 0.15,
    "goals": 0.20,
    "income": 0.10,
    "occupation": 0.10,
    "family_size": 0.05,
})

# (minimum present fields, flat bonus); bonuses are cumulative
FIELD_COUNT_BONUSES: tuple[tuple[int, float], ...] = ((3, 0.10), (5, 0.10))

# Results at or below this are not usable by callers
MIN_CONFIDENCE = 0.3

# Fields prompted for when absent, in prompt order
SUGGESTED_FIELDS: tuple[str, ...] = ("age", "education", "location", "goals")


def present_fields(attrs: ParsedAttributes) -> list[str]:
    """Return the weighted fields that carry a value, in weight-table order."""
    present = []
    for name in FIELD_WEIGHTS:
        value = getattr(attrs, name)
        if value is None or value == []:
            continue
        present.append(name)
    return present


def score_confidence(attrs: ParsedAttributes) -> float:
    """Weighted sum over present fields plus flat bonuses, capped at 1.0."""
    fields = present_fields(attrs)
    confidence = sum(FIELD_WEIGHTS[name] for name in fields)
    for threshold, bonus in FIELD_COUNT_BONUSES:
        if len(fields) >= threshold:
            confidence += bonus
    return round(min(confidence, 1.0), 4)


def is_usable(confidence: float) -> bool:
    return confidence > MIN_CONFIDENCE


def missing_field_suggestions(attrs: ParsedAttributes, locale: str = "en") -> list[str]:
    """Localized prompts for each absent field among age/education/location/goals."""
    prompts = rules_for(locale).suggestions
    fields = set(present_fields(attrs))
    return [prompts[name] for name in SUGGESTED_FIELDS if name not in fields]


def validate_attributes(attrs: ParsedAttributes) -> list[str]:
    """Report numeric fields outside their bounds.

    Extraction never produces such values, but attributes assembled by callers
    with ``model_construct`` bypass pydantic validation.
    """
    errors: list[str] = []
    if attrs.age is not None and not 1 <= attrs.age <= 120:
        errors.append("Invalid age detected")
    if attrs.family_size is not None and not 1 <= attrs.family_size <= 20:
        errors.append("Invalid family size detected")
    return errors
