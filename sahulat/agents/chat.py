"""One chat turn: parse, merge, recommend, optionally record."""

from __future__ import annotations

import logging

from sahulat.agents.assistant import enhance_user_profile
from sahulat.agents.profile_merger import merge_profile
from sahulat.agents.profile_parser import parse_user_input
from sahulat.config import Settings, load_settings
from sahulat.graph import recommend
from sahulat.models.program import CandidateProgram
from sahulat.models.profile import UserProfile
from sahulat.models.recommendation import ChatResponse
from sahulat.storage.database import ChatLogRepository

logger = logging.getLogger(__name__)


def handle_chat(
    message: str,
    profile: UserProfile | None,
    corpus: list[CandidateProgram],
    settings: Settings | None = None,
    locale: str | None = None,
    tier: str | None = None,
    chat_log: ChatLogRepository | None = None,
    user_id: str = "anonymous",
    enhance_profile: bool = False,
) -> ChatResponse:
    """Handle one user message end to end.

    With ``enhance_profile`` the completion service is also asked to fill in
    profile fields the rule tables missed, before recommending.

    Recording to ``chat_log`` is best-effort: failures are logged and the
    response is returned regardless.
    """
    if not message or not message.strip():
        return ChatResponse(success=False, error="Message is required")

    settings = settings or load_settings()
    parsed = parse_user_input(
        message,
        locale=locale,
        default_country=settings.default_country,
        default_locale=settings.default_locale,
    )
    updated_profile = merge_profile(profile, parsed.data)
    enhancement_suggestions: list[str] = []
    if enhance_profile:
        updated_profile, enhancement_suggestions = enhance_user_profile(
            message, updated_profile, settings
        )

    result = recommend(message, updated_profile, corpus, settings=settings, tier=tier)

    suggestions = result.suggestions or enhancement_suggestions or parsed.suggestions
    chat_id = None
    if chat_log is not None and result.success:
        try:
            chat_id = chat_log.log_chat(
                user_id=user_id,
                message=message,
                response=result.message,
                recommended_programs=[p.id for p in result.recommended_programs],
                web_results=result.web_results,
                confidence=result.confidence,
            )
        except Exception as e:
            logger.error("Could not save chat message: %s", e)

    return ChatResponse(
        success=result.success,
        message=result.message,
        profile=updated_profile,
        recommended_programs=result.recommended_programs,
        web_results=result.web_results,
        suggestions=suggestions,
        confidence=result.confidence,
        error=result.error,
        chat_id=chat_id,
    )
