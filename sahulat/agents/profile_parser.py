"""Profile parser: pulls structured applicant attributes out of free text."""

from __future__ import annotations

import logging
import re

from sahulat.agents.confidence import (
    is_usable,
    missing_field_suggestions,
    score_confidence,
    validate_attributes,
)
from sahulat.agents.extraction_rules import (
    DEFAULT_LOCALE,
    LOCALE_RULES,
    LocaleRules,
    Pattern,
    rules_for,
)
from sahulat.models.profile import Location, ParsedAttributes, ParsingResult

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY = "Pakistan"

AGE_BOUNDS = (1, 120)
FAMILY_SIZE_BOUNDS = (1, 20)
MIN_TEXT_CAPTURE = 3

_LATIN = re.compile(r"[A-Za-z]")
_ARABIC_SCRIPT = re.compile(r"[\u0600-\u06FF]")


def parse_user_input(
    text: str,
    locale: str | None = None,
    default_country: str = DEFAULT_COUNTRY,
    default_locale: str = DEFAULT_LOCALE,
) -> ParsingResult:
    """Parse one message into a ParsingResult.

    ``success`` is True when the confidence clears the acceptance threshold.
    When no locale is given it is detected from the script of the text.
    """
    locale = locale or detect_locale(text, default=default_locale)
    data = extract_attributes(text, locale, default_country=default_country)

    result = ParsingResult(
        success=is_usable(data.confidence),
        data=data,
        errors=validate_attributes(data),
        suggestions=missing_field_suggestions(data, locale),
    )
    logger.info(
        "Parsed message (locale=%s): confidence=%.2f, usable=%s, %d suggestions",
        locale, data.confidence, result.success, len(result.suggestions),
    )
    return result


def extract_attributes(
    text: str,
    locale: str = DEFAULT_LOCALE,
    default_country: str = DEFAULT_COUNTRY,
) -> ParsedAttributes:
    """Extract every attribute the locale's rule table can match.

    Never raises for odd input; unmatched fields are left absent.
    """
    if locale not in LOCALE_RULES:
        logger.warning("Unknown locale %r - using %r rules", locale, DEFAULT_LOCALE)
        locale = DEFAULT_LOCALE
    rules = rules_for(locale)
    text = text or ""

    attrs = ParsedAttributes(
        age=_first_bounded_int(text, rules.age, AGE_BOUNDS),
        gender=_first_group(text, rules.gender),
        education=_first_group(text, rules.education),
        location=_extract_location(text, rules, default_country),
        goals=_extract_goals(text, rules),
        income=_first_group(text, rules.income),
        occupation=_first_capture(text, rules.occupation),
        family_size=_first_bounded_int(text, rules.family_size, FAMILY_SIZE_BOUNDS),
        disabilities=_extract_disabilities(text, rules),
        languages=_extract_languages(text, rules),
    )
    attrs.confidence = score_confidence(attrs)
    logger.debug("Extracted attributes: %s", attrs.model_dump(exclude_defaults=True))
    return attrs


def detect_locale(text: str, default: str = DEFAULT_LOCALE) -> str:
    """Guess the locale from script: Urdu when Arabic-script letters dominate.

    Text with no letters of either script gets ``default``.
    """
    arabic = len(_ARABIC_SCRIPT.findall(text or ""))
    latin = len(_LATIN.findall(text or ""))
    if arabic == latin == 0:
        return default
    return "ur" if arabic > latin else "en"


# =============================================================================
# Field helpers
# =============================================================================


def _first_bounded_int(
    text: str, patterns: tuple[Pattern, ...], bounds: tuple[int, int]
) -> int | None:
    """First captured integer within bounds; out-of-bound captures fall through."""
    low, high = bounds
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        try:
            value = int(match.group(1))
        except ValueError:
            continue
        if low <= value <= high:
            return value
        logger.debug("Dropped out-of-bound value %d for pattern %s", value, pattern.pattern)
    return None


def _first_group(text: str, groups):
    """Return the key of the first group with any matching pattern."""
    for key, patterns in groups:
        if any(pattern.search(text) for pattern in patterns):
            return key
    return None


def _first_capture(text: str, patterns: tuple[Pattern, ...]) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            captured = " ".join(match.group(1).split())
            if len(captured) >= MIN_TEXT_CAPTURE:
                return captured
    return None


def _extract_location(
    text: str, rules: LocaleRules, default_country: str
) -> Location | None:
    city = _first_capture(text, rules.location)
    if city is None:
        return None
    return Location(city=city, country=default_country)


def _extract_goals(text: str, rules: LocaleRules) -> list[str]:
    goals: list[str] = []
    for token, pattern in rules.goals:
        normalized = token.strip().lower()
        if pattern.search(text) and normalized not in goals:
            goals.append(normalized)
    return goals


def _extract_disabilities(text: str, rules: LocaleRules) -> list[str]:
    if any(pattern.search(text) for pattern in rules.disabilities):
        return ["disability"]
    return []


def _extract_languages(text: str, rules: LocaleRules) -> list[str]:
    languages = [rules.language]
    if _LATIN.search(text) and "english" not in languages:
        languages.append("english")
    return languages
