"""Free-form assistant calls: short answers and LLM profile enhancement."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from sahulat.agents.recommender import extract_json
from sahulat.config import Settings
from sahulat.errors import SahulatError
from sahulat.models.profile import UserProfile
from sahulat.tools.model_selector import ModelTier, resolve_model
from sahulat.tools.openrouter_client import call_completion

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REPLY = "AI service is not configured. Please contact support."
EMPTY_REPLY = "I apologize, but I couldn't generate a response. Please try again."
FAILURE_REPLY = "I apologize, but I'm having trouble right now. Please try again in a moment."

SIMPLE_SYSTEM_PROMPT = (
    "You are Sahulat AI, a helpful assistant for government program discovery in "
    "{country}. Keep responses concise and helpful."
)

ENHANCE_PROMPT = """Analyze this user message and extract or update profile information. Current profile: {profile_json}

User message: "{message}"

Extract any new profile information from the message. Only suggest asking for information if it's completely missing and essential for program matching. Focus on extracting what the user has already shared.

Respond in JSON:
{{
  "updatedProfile": {{ "age": 25, "education": "bachelor" }},
  "suggestions": ["Ask for income level", "Ask for occupation"]
}}"""

# Profile fields the completion service may update
ENHANCEABLE_FIELDS = (
    "age", "gender", "education", "location", "goals",
    "income", "occupation", "family_size", "disabilities", "languages",
)


def generate_simple_response(message: str, settings: Settings) -> str:
    """One-shot concise answer on the fast tier; canned apology on failure."""
    if not settings.has_completion_credentials:
        return NOT_CONFIGURED_REPLY

    try:
        model = resolve_model(
            ModelTier.FAST, settings.openrouter_api_key, base_url=settings.openrouter_base_url
        )
        reply = call_completion(
            model,
            [
                {"role": "system", "content": SIMPLE_SYSTEM_PROMPT.format(country=settings.default_country)},
                {"role": "user", "content": message},
            ],
            settings.openrouter_api_key,
            temperature=0.7,
            max_tokens=200,
            base_url=settings.openrouter_base_url,
            timeout=settings.completion_timeout,
            referer=settings.openrouter_referer,
            title=settings.openrouter_title,
        )
    except SahulatError as e:
        logger.error("Simple response error: %s", e)
        return FAILURE_REPLY
    return reply.strip() or EMPTY_REPLY


def enhance_user_profile(
    message: str, profile: UserProfile, settings: Settings
) -> tuple[UserProfile, list[str]]:
    """Ask the completion service to update the profile from a message.

    Falls back to the unchanged profile with rule-based prompts for missing
    fields when the service is unavailable or its answer does not validate.
    """
    if not settings.has_completion_credentials:
        return profile, []

    profile_json = profile.model_dump_json(include=set(ENHANCEABLE_FIELDS), exclude_none=True)
    try:
        model = resolve_model(
            ModelTier.FAST, settings.openrouter_api_key, base_url=settings.openrouter_base_url
        )
        raw = call_completion(
            model,
            [
                {"role": "system", "content": "You are a profile extraction assistant. Always respond in JSON format."},
                {"role": "user", "content": ENHANCE_PROMPT.format(profile_json=profile_json, message=message)},
            ],
            settings.openrouter_api_key,
            temperature=0.3,
            max_tokens=300,
            json_mode=True,
            base_url=settings.openrouter_base_url,
            timeout=settings.completion_timeout,
            referer=settings.openrouter_referer,
            title=settings.openrouter_title,
        )
        json_str = extract_json(raw)
        data = json.loads(json_str) if json_str else {}
        updates = {
            k: v for k, v in (data.get("updatedProfile") or {}).items()
            if k in ENHANCEABLE_FIELDS and v is not None
        }
        merged = profile.model_dump()
        merged.update(updates)
        enhanced = UserProfile.model_validate(merged)
        suggestions = [str(s) for s in data.get("suggestions") or []]
    except (SahulatError, ValueError, ValidationError, AttributeError) as e:
        logger.error("Profile enhancement error: %s", e)
        return profile, _basic_suggestions(profile)

    logger.info("Profile %s enhanced with fields: %s", profile.id, ", ".join(updates) or "none")
    return enhanced, suggestions


def _basic_suggestions(profile: UserProfile) -> list[str]:
    suggestions = []
    if not profile.age:
        suggestions.append("Please tell us your age")
    if not profile.education:
        suggestions.append("What is your education level?")
    if not profile.location:
        suggestions.append("Where are you located?")
    if not profile.goals:
        suggestions.append("What type of programs are you looking for?")
    return suggestions or ["Tell us more about yourself to get better recommendations"]
