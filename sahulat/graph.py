"""LangGraph workflow: the degrading recommendation pipeline.

NO_CORPUS -> canned_response
HAS_CORPUS -> check_config -> augment -> build_prompt -> call_model
    -> parse_response -> filter_programs         (success)
    -> fallback                                  (transport / malformed)
check_config ends the run with success=False when the credential is missing.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TypedDict

from langgraph.graph import END, StateGraph

from sahulat.agents.recommender import (
    build_canned_result,
    build_configuration_error_result,
    build_fallback_result,
    build_recommendation_messages,
    build_success_result,
    derive_goals,
    parse_recommendation_output,
)
from sahulat.config import Settings, load_settings
from sahulat.errors import SahulatError
from sahulat.models.program import CandidateProgram
from sahulat.models.profile import UserProfile
from sahulat.models.recommendation import (
    LLMRecommendationOutput,
    RecommendationResult,
    SearchResult,
)
from sahulat.tools.model_selector import resolve_model
from sahulat.tools.openrouter_client import call_completion
from sahulat.tools.web_search import search_specific_programs

logger = logging.getLogger(__name__)

FAILURE_CONFIGURATION = "configuration"
FAILURE_TRANSPORT = "transport"
FAILURE_MALFORMED = "malformed"


# =============================================================================
# Pipeline State
# =============================================================================


class RecommendationState(TypedDict, total=False):
    """State passed between nodes of the recommendation graph."""

    # Inputs
    message: str
    profile: UserProfile | None
    corpus: list[CandidateProgram]
    settings: Settings
    tier: str

    # Intermediate
    goals: list[str]
    web_results: list[SearchResult]
    prompt_messages: list[dict]
    model: str
    raw_response: str
    parsed: LLMRecommendationOutput
    failure: str | None

    # Output
    result: RecommendationResult


# =============================================================================
# Nodes
# =============================================================================


def check_corpus_node(state: RecommendationState) -> dict:
    """Entry node; routing on corpus presence happens in route_corpus."""
    corpus = state.get("corpus") or []
    logger.info("=== Recommend: %d candidate programs ===", len(corpus))
    return {"failure": None}


def canned_response_node(state: RecommendationState) -> dict:
    logger.warning("Empty program corpus - returning category overview")
    settings = state["settings"]
    return {"result": build_canned_result(country=settings.default_country)}


def check_config_node(state: RecommendationState) -> dict:
    settings = state["settings"]
    if not settings.has_completion_credentials:
        logger.error("OPENROUTER_API_KEY not configured - cannot recommend")
        return {
            "failure": FAILURE_CONFIGURATION,
            "result": build_configuration_error_result(),
        }
    return {}


def augment_node(state: RecommendationState) -> dict:
    """Best-effort web search for extra opportunities."""
    settings = state["settings"]
    profile = state.get("profile")
    goals = derive_goals(state.get("message", ""), profile)

    try:
        response = search_specific_programs(
            profile,
            goals,
            location=settings.default_country,
            serper_api_key=settings.serper_api_key,
            timeout=settings.search_timeout,
            serper_url=settings.serper_url,
            duckduckgo_url=settings.duckduckgo_url,
        )
        web_results = response.results
    except Exception as e:
        logger.error("Web augmentation failed: %s", e)
        web_results = []

    logger.info("Augmentation: goals=%s, %d web results", goals, len(web_results))
    return {"goals": goals, "web_results": web_results}


def build_prompt_node(state: RecommendationState) -> dict:
    settings = state["settings"]
    messages = build_recommendation_messages(
        state.get("message", ""),
        state.get("profile"),
        state.get("corpus") or [],
        state.get("web_results") or [],
        country=settings.default_country,
    )
    return {"prompt_messages": messages}


def call_model_node(state: RecommendationState) -> dict:
    settings = state["settings"]
    tier = state.get("tier") or settings.model_tier

    try:
        model = resolve_model(
            tier,
            settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
        )
        raw = call_completion(
            model,
            state["prompt_messages"],
            settings.openrouter_api_key,
            temperature=0.3,
            max_tokens=1000,
            json_mode=True,
            base_url=settings.openrouter_base_url,
            timeout=settings.completion_timeout,
            referer=settings.openrouter_referer,
            title=settings.openrouter_title,
        )
    except SahulatError as e:
        logger.warning("Completion call failed: %s", e)
        return {"failure": FAILURE_TRANSPORT}

    return {"model": model, "raw_response": raw}


def parse_response_node(state: RecommendationState) -> dict:
    try:
        parsed = parse_recommendation_output(state.get("raw_response", ""))
    except SahulatError as e:
        logger.warning("Unusable completion output: %s", e)
        return {"failure": FAILURE_MALFORMED}
    return {"parsed": parsed}


def filter_programs_node(state: RecommendationState) -> dict:
    result = build_success_result(
        state["parsed"],
        state.get("corpus") or [],
        state.get("web_results") or [],
    )
    return {"result": result}


def fallback_node(state: RecommendationState) -> dict:
    logger.warning("Degraded mode (%s) - deterministic recommendations", state.get("failure"))
    settings = state["settings"]
    return {
        "result": build_fallback_result(
            state.get("corpus") or [], country=settings.default_country
        )
    }


# =============================================================================
# Routing
# =============================================================================


def route_corpus(state: RecommendationState) -> str:
    return "check_config" if state.get("corpus") else "canned_response"


def route_config(state: RecommendationState) -> str:
    return "end" if state.get("failure") == FAILURE_CONFIGURATION else "augment"


def route_failure(next_node: str):
    def _route(state: RecommendationState) -> str:
        return "fallback" if state.get("failure") else next_node

    return _route


# =============================================================================
# Build the Graph
# =============================================================================


@lru_cache(maxsize=1)
def build_recommendation_graph():
    """Build and compile the recommendation state machine."""
    graph = StateGraph(RecommendationState)

    graph.add_node("check_corpus", check_corpus_node)
    graph.add_node("canned_response", canned_response_node)
    graph.add_node("check_config", check_config_node)
    graph.add_node("augment", augment_node)
    graph.add_node("build_prompt", build_prompt_node)
    graph.add_node("call_model", call_model_node)
    graph.add_node("parse_response", parse_response_node)
    graph.add_node("filter_programs", filter_programs_node)
    graph.add_node("fallback", fallback_node)

    graph.set_entry_point("check_corpus")
    graph.add_conditional_edges(
        "check_corpus",
        route_corpus,
        {"canned_response": "canned_response", "check_config": "check_config"},
    )
    graph.add_edge("canned_response", END)
    graph.add_conditional_edges(
        "check_config", route_config, {"end": END, "augment": "augment"}
    )
    graph.add_edge("augment", "build_prompt")
    graph.add_edge("build_prompt", "call_model")
    graph.add_conditional_edges(
        "call_model",
        route_failure("parse_response"),
        {"parse_response": "parse_response", "fallback": "fallback"},
    )
    graph.add_conditional_edges(
        "parse_response",
        route_failure("filter_programs"),
        {"filter_programs": "filter_programs", "fallback": "fallback"},
    )
    graph.add_edge("filter_programs", END)
    graph.add_edge("fallback", END)

    return graph.compile()


def recommend(
    message: str,
    profile: UserProfile | None,
    corpus: list[CandidateProgram],
    settings: Settings | None = None,
    tier: str | None = None,
) -> RecommendationResult:
    """Recommend programs for a message. Fails only on missing credentials."""
    settings = settings or load_settings()
    corpus = list(corpus or [])
    initial_state: RecommendationState = {
        "message": message or "",
        "profile": profile,
        "corpus": corpus,
        "settings": settings,
        "tier": tier or settings.model_tier,
    }

    try:
        final_state = build_recommendation_graph().invoke(initial_state)
        return final_state["result"]
    except Exception as e:
        logger.error("Recommendation pipeline crashed: %s", e, exc_info=True)
        if not corpus:
            return build_canned_result(country=settings.default_country)
        return build_fallback_result(corpus, country=settings.default_country)
