"""Program recommendation helpers: prompt context, response parsing, fallbacks."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from sahulat.errors import MalformedResponseError
from sahulat.models.program import CandidateProgram
from sahulat.models.profile import UserProfile
from sahulat.models.recommendation import (
    LLMRecommendationOutput,
    RecommendationResult,
    SearchResult,
)

logger = logging.getLogger(__name__)

CONTEXT_PROGRAM_LIMIT = 10
FALLBACK_PROGRAM_COUNT = 3
DEFAULT_CONFIDENCE = 0.8

# Message keyword -> goal token; first match wins
GOAL_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("scholarship", "scholarship"),
    ("loan", "loan"),
    ("training", "training"),
    ("job", "employment"),
    ("housing", "housing"),
    ("health", "healthcare"),
)
GENERIC_GOAL = "government programs"

FALLBACK_SUGGESTIONS: tuple[str, ...] = (
    "Share your age for age-specific programs",
    "Tell us your education level for education programs",
    "Mention your location for local opportunities",
    "Describe your specific goals (scholarships, loans, training, etc.)",
)

CANNED_SUGGESTIONS: tuple[str, ...] = (
    "Tell us your age",
    "Share your education level",
    "Mention your location",
    "Describe your goals",
)

FALLBACK_ERROR = "AI service temporarily unavailable, showing available programs"
NO_CORPUS_ERROR = "No programs in database, providing general information"
MISSING_KEY_ERROR = "Missing API key"

# Overview sections shown when there is no corpus: (heading, bullets)
CATEGORY_OVERVIEW: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("🎓 Scholarships & Education", (
        "Student scholarships for various education levels",
        "Merit-based and need-based financial aid",
        "International study opportunities",
    )),
    ("💰 Business & Financial Support", (
        "Small business loans and grants",
        "Entrepreneurship development programs",
        "Agricultural and farming support",
    )),
    ("🔧 Skill Development & Training", (
        "Technical and vocational training",
        "IT and digital skills programs",
        "Professional certification courses",
    )),
    ("💼 Employment & Jobs", (
        "Job placement and career services",
        "Internship programs",
        "Public sector employment opportunities",
    )),
    ("🏠 Housing & Infrastructure", (
        "Affordable housing schemes",
        "Home improvement grants",
        "Rural development programs",
    )),
    ("🏥 Healthcare & Medical", (
        "Health insurance schemes",
        "Medical treatment support",
        "Disability assistance programs",
    )),
)

SYSTEM_PROMPT = """You are Sahulat AI, a government program discovery assistant in {country}. Your PRIMARY goal is to RECOMMEND SPECIFIC PROGRAMS from the available list.

CRITICAL RULES:
1. ALWAYS recommend 2-3 specific programs from the available list first
2. NEVER just ask questions without providing program recommendations
3. Even with incomplete user profiles, recommend programs based on what you know
4. Provide specific details about each recommended program
5. Only ask for missing information AFTER providing recommendations

You must respond in JSON format with actual program recommendations."""

RECOMMENDATION_PROMPT = """You have access to {program_count} government programs in our database and {web_count} additional opportunities found online.

Available Programs in Database:
{programs_context}{web_context}

User Profile: {profile_context}
User Message: "{message}"

## Instructions:
1. Recommend 2-3 specific programs from the database list above, by id
2. If relevant online opportunities are listed, mention 1-2 of them as additional options
3. For each program, explain what it is, why it suits the user, benefits, requirements, funding amount, deadline and how to apply
4. Only after the program details, briefly mention 1-2 missing profile details if needed

## Required Output:
Respond ONLY with valid JSON matching this exact schema:
{{
    "message": "your detailed program recommendations",
    "recommendedPrograms": ["program_id_1", "program_id_2"],
    "webResults": ["url_1", "url_2"],
    "suggestions": ["Ask for age", "Ask for education level"],
    "confidence": <float 0-1>
}}
"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


# =============================================================================
# Goal derivation
# =============================================================================


def derive_goals(message: str, profile: UserProfile | None) -> list[str]:
    """Goal tokens from the profile, else from keywords in the message."""
    if profile is not None and profile.goals:
        return list(profile.goals)
    text = (message or "").lower()
    for keyword, goal in GOAL_KEYWORDS:
        if keyword in text:
            return [goal]
    return [GENERIC_GOAL]


# =============================================================================
# Prompt context
# =============================================================================


def format_programs_context(corpus: list[CandidateProgram]) -> str:
    return "\n".join(
        f"- [{p.id}] {p.title} ({p.category.value}): {p.description}"
        for p in corpus[:CONTEXT_PROGRAM_LIMIT]
    )


def format_web_context(web_results: list[SearchResult]) -> str:
    if not web_results:
        return ""
    lines = "\n".join(f"- {r.title}: {r.snippet} ({r.link})" for r in web_results)
    return f"\n\nAdditional opportunities found online:\n{lines}"


def format_profile_context(profile: UserProfile | None) -> str:
    if profile is None:
        return "Basic profile"
    items = profile.attribute_items()
    if not items:
        return "Basic profile"
    return ", ".join(f"{name}: {text}" for name, text in items)


def build_recommendation_messages(
    message: str,
    profile: UserProfile | None,
    corpus: list[CandidateProgram],
    web_results: list[SearchResult],
    country: str = "Pakistan",
) -> list[dict]:
    """System + user messages for the structured recommendation request."""
    prompt = RECOMMENDATION_PROMPT.format(
        program_count=len(corpus),
        web_count=len(web_results),
        programs_context=format_programs_context(corpus),
        web_context=format_web_context(web_results),
        profile_context=format_profile_context(profile),
        message=message,
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(country=country)},
        {"role": "user", "content": prompt},
    ]


# =============================================================================
# Response parsing
# =============================================================================


def extract_json(text: str) -> str | None:
    """Greedy scan for the outermost {...} span; the model may wrap it in prose."""
    match = _JSON_OBJECT.search(text or "")
    return match.group(0) if match else None


def parse_recommendation_output(raw: str) -> LLMRecommendationOutput:
    """Parse the backend's raw text into the recommendation schema.

    Raises:
        MalformedResponseError: no JSON object, invalid JSON or schema mismatch.
    """
    json_str = extract_json(raw)
    if not json_str:
        raise MalformedResponseError("No JSON object in completion response")
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"JSON parse error: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError("Completion JSON is not an object")
    try:
        return LLMRecommendationOutput.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Schema validation error: {e}") from e


def select_programs(corpus: list[CandidateProgram], ids: list[str]) -> list[CandidateProgram]:
    """Corpus entries whose id is in ``ids``, in corpus order."""
    wanted = set(ids)
    return [p for p in corpus if p.id in wanted]


def build_success_result(
    parsed: LLMRecommendationOutput,
    corpus: list[CandidateProgram],
    web_results: list[SearchResult],
) -> RecommendationResult:
    """Final result for a parsed backend answer.

    Only cited links that came from the augmentation step are passed on.
    """
    known_links = {r.link for r in web_results}
    cited = [url for url in parsed.web_results if url in known_links]
    programs = select_programs(corpus, parsed.recommended_programs)
    logger.info(
        "Backend recommended %d ids, %d matched the corpus, %d web links kept",
        len(parsed.recommended_programs), len(programs), len(cited),
    )
    return RecommendationResult(
        success=True,
        message=parsed.message,
        recommended_programs=programs,
        web_results=cited,
        suggestions=parsed.suggestions,
        confidence=parsed.confidence if parsed.confidence is not None else DEFAULT_CONFIDENCE,
    )


# =============================================================================
# Degraded responses
# =============================================================================


def format_program_details(program: CandidateProgram) -> str:
    benefits = "; ".join(program.benefits) or "Not specified"
    requirements = "; ".join(program.requirements) or "Not specified"
    funding = program.funding_amount.display() if program.funding_amount else "Not specified"
    return (
        f"**{program.title}** ({program.category.value})\n"
        f"{program.description}\n\n"
        f"**Benefits:** {benefits}\n"
        f"**Requirements:** {requirements}\n"
        f"**Funding Amount:** {funding}\n"
        f"**Application Deadline:** {program.application_deadline or 'Not specified'}\n"
        f"**How to Apply:** "
        f"{program.application_url or 'Contact the program office for application details'}\n\n"
        f"---"
    )


def build_fallback_result(
    corpus: list[CandidateProgram], country: str = "Pakistan"
) -> RecommendationResult:
    """Deterministic answer from the first corpus entries, no ranking."""
    programs = list(corpus[:FALLBACK_PROGRAM_COUNT])
    details = "\n\n".join(format_program_details(p) for p in programs)
    message = (
        f"Here are specific government programs available for you in {country}:\n\n"
        f"{details}\n\n"
        "These programs are currently available and accepting applications. "
        "For more personalized recommendations, you can share your age, "
        "education level, location, and specific goals."
    )
    return RecommendationResult(
        success=True,
        message=message,
        recommended_programs=programs,
        suggestions=list(FALLBACK_SUGGESTIONS),
        confidence=0.0,
        error=FALLBACK_ERROR,
    )


def build_canned_result(country: str = "Pakistan") -> RecommendationResult:
    """Static category overview for when there is no corpus at all."""
    sections = "\n\n".join(
        f"**{heading}**\n" + "\n".join(f"• {item}" for item in items)
        for heading, items in CATEGORY_OVERVIEW
    )
    message = (
        f"Here are the main types of government programs available in {country}:\n\n"
        f"{sections}\n\n"
        "To get specific program recommendations, please tell me about your age, "
        "education, location, and what type of support you're looking for."
    )
    return RecommendationResult(
        success=True,
        message=message,
        suggestions=list(CANNED_SUGGESTIONS),
        confidence=0.0,
        error=NO_CORPUS_ERROR,
    )


def build_configuration_error_result() -> RecommendationResult:
    return RecommendationResult(
        success=False,
        message="AI service is not configured. Please contact support.",
        error=MISSING_KEY_ERROR,
    )
